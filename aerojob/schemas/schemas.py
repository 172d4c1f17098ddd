"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.

Survey input is deliberately loose (free-form type / status / audience
strings, optional question ids): folding it into canonical values is the
job of aerojob.models.survey, not of these schemas.
"""

from pydantic import AliasChoices, BaseModel, EmailStr, Field
from typing import Optional, List, Any
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    alumni = "alumni"
    admin = "admin"


class RegisterRole(str, Enum):
    student = "student"
    alumni = "alumni"


class JobType(str, Enum):
    internship = "internship"
    ojt = "ojt"
    part_time = "part-time"
    full_time = "full-time"
    contract = "contract"


class JobStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    closed = "closed"
    draft = "draft"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: RegisterRole = RegisterRole.student

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    user_id: int
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    created_at: datetime

class UserStatusUpdate(BaseModel):
    is_active: bool


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    industry: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None

class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    industry: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None
    is_active: Optional[bool] = None

class CompanyResponse(BaseModel):
    company_id: int
    name: str
    industry: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None
    is_active: bool = True
    created_at: datetime


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=100)
    company_id: int
    description: Optional[str] = Field(None, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=200)
    job_type: JobType = JobType.internship
    location: str = Field(..., min_length=1)
    is_remote: bool = False
    is_hybrid: bool = False
    skills_required: List[str] = []
    application_deadline: Optional[datetime] = None
    status: JobStatus = JobStatus.active

class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=100)
    company_id: Optional[int] = None
    description: Optional[str] = Field(None, max_length=2000)
    short_description: Optional[str] = Field(None, max_length=200)
    job_type: Optional[JobType] = None
    location: Optional[str] = None
    is_remote: Optional[bool] = None
    is_hybrid: Optional[bool] = None
    skills_required: Optional[List[str]] = None
    application_deadline: Optional[datetime] = None
    status: Optional[JobStatus] = None

class JobResponse(BaseModel):
    job_id: int
    company_id: int
    company_name: str
    title: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    job_type: str
    location: str
    is_remote: bool
    is_hybrid: bool
    skills_required: List[str] = []
    application_deadline: Optional[datetime] = None
    status: str
    created_at: datetime

class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int
    page: int
    page_size: int


# ============================================================
# SURVEY SCHEMAS
# ============================================================

class QuestionInput(BaseModel):
    id: Optional[str] = Field(None, validation_alias=AliasChoices("id", "_id"))
    text: Optional[str] = None
    type: Optional[str] = None
    required: bool = False
    options: Optional[List[Any]] = None

class SurveyInput(BaseModel):
    """Create and update payload (update replaces the whole definition)."""
    title: str = ""
    description: Optional[str] = None
    audience: Optional[str] = None
    status: Optional[str] = None
    questions: List[QuestionInput] = []

class QuestionResponse(BaseModel):
    id: str
    text: str
    type: str
    required: bool
    options: List[str] = []

class SurveyResponse(BaseModel):
    id: str
    title: str
    description: str = ""
    audience: str
    status: str
    questions: List[QuestionResponse] = []
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# SURVEY RESPONSE (SUBMISSION) SCHEMAS
# ============================================================

class SubmissionRequest(BaseModel):
    # entries are {questionId, value} objects or bare positional values
    answers: List[Any] = []

class AnswerResponse(BaseModel):
    question_id: str
    value: Any = None

class SubmissionResponse(BaseModel):
    id: str
    survey_id: Optional[str] = None
    participant_id: Optional[Any] = None
    answers: List[AnswerResponse] = []
    created_at: Optional[datetime] = None
    participant_email: Optional[str] = None
    participant_name: Optional[str] = None
    role: Optional[str] = None


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class SearchLogRequest(BaseModel):
    term: str = ""
    role: Optional[str] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
