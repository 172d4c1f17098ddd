"""
Job Routes

GET /jobs - List active jobs with filters
GET /jobs/{job_id} - Get job details
POST /jobs - Create job posting (admin only)
PUT /jobs/{job_id} - Update job (admin only)
DELETE /jobs/{job_id} - Delete job (admin only)
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import text
from typing import Optional

from aerojob.db.postgres import get_db_session, execute_raw_sql, fetch_one
from aerojob.core.auth import get_current_admin, get_optional_user
from aerojob.services.mongo_service import log_search_term
from aerojob.schemas.schemas import (
    JobCreate, JobUpdate, JobResponse, JobListResponse, JobStatus, MessageResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])

JOB_SELECT = """
    SELECT j.job_id, j.company_id, c.name AS company_name, j.title, j.description,
           j.short_description, j.job_type, j.location, j.is_remote, j.is_hybrid,
           j.skills_required, j.application_deadline, j.status, j.created_at
    FROM jobs j JOIN companies c ON j.company_id = c.company_id
"""


def _job_response(r: dict) -> JobResponse:
    return JobResponse(**{**r, "skills_required": list(r["skills_required"] or [])})


def _clean_skills(skills) -> list:
    cleaned = []
    for skill in skills or []:
        skill = skill.strip()
        if skill and skill not in cleaned:
            cleaned.append(skill)
    return cleaned


def _ensure_company(company_id: int):
    if not fetch_one("SELECT company_id FROM companies WHERE company_id = :id", {"id": company_id}):
        raise HTTPException(status_code=400, detail="Company does not exist")


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, admin: dict = Depends(get_current_admin)):
    """Create a new job posting."""
    _ensure_company(job.company_id)

    row = fetch_one(
        """
        INSERT INTO jobs (company_id, title, description, short_description, job_type, location,
            is_remote, is_hybrid, skills_required, application_deadline, status, created_by)
        VALUES (:company_id, :title, :description, :short_description, :job_type, :location,
            :is_remote, :is_hybrid, :skills, :deadline, :status, :created_by)
        RETURNING job_id
        """,
        {
            "company_id": job.company_id, "title": job.title.strip(), "description": job.description,
            "short_description": job.short_description, "job_type": job.job_type.value,
            "location": job.location.strip(), "is_remote": job.is_remote, "is_hybrid": job.is_hybrid,
            "skills": _clean_skills(job.skills_required), "deadline": job.application_deadline,
            "status": job.status.value, "created_by": admin["user_id"]
        }
    )

    created = fetch_one(JOB_SELECT + " WHERE j.job_id = :jid", {"jid": row["job_id"]})
    return _job_response(created)


@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    search: Optional[str] = Query(None, description="Search in title and description"),
    location: Optional[str] = Query(None),
    job_type: Optional[str] = Query(None),
    company_id: Optional[int] = Query(None),
    remote_only: bool = Query(False),
    status: JobStatus = Query(JobStatus.active),
    user: Optional[dict] = Depends(get_optional_user)
):
    """List job postings with filters and pagination, newest first."""
    sql = JOB_SELECT + " WHERE j.status = :status"
    params = {"status": status.value}

    if search:
        sql += " AND (j.title ILIKE :search OR j.description ILIKE :search)"
        params["search"] = f"%{search}%"
        # analytics only; never blocks the listing
        log_search_term(search, user_id=user["user_id"] if user else None, role=user["role"] if user else None)
    if location:
        sql += " AND j.location ILIKE :location"
        params["location"] = f"%{location}%"
    if job_type:
        sql += " AND j.job_type = :job_type"
        params["job_type"] = job_type.lower()
    if company_id:
        sql += " AND j.company_id = :company_id"
        params["company_id"] = company_id
    if remote_only:
        sql += " AND j.is_remote = TRUE"

    count_row = fetch_one(f"SELECT COUNT(*) AS total FROM ({sql}) AS filtered", params)
    total = count_row["total"] if count_row else 0

    offset = (page - 1) * page_size
    sql += " ORDER BY j.created_at DESC LIMIT :limit OFFSET :offset"
    results = execute_raw_sql(sql, {**params, "limit": page_size, "offset": offset})

    return JobListResponse(
        jobs=[_job_response(r) for r in results], total=total, page=page, page_size=page_size
    )


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int):
    """Get details of a specific job."""
    row = fetch_one(JOB_SELECT + " WHERE j.job_id = :jid", {"jid": job_id})
    if not row:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_response(row)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: int, update: JobUpdate, admin: dict = Depends(get_current_admin)):
    """Update a job posting. Only supplied fields change."""
    if not fetch_one("SELECT job_id FROM jobs WHERE job_id = :jid", {"jid": job_id}):
        raise HTTPException(status_code=404, detail="Job not found")

    updates = []
    params = {"jid": job_id, "updated_by": admin["user_id"]}

    for field in ["title", "description", "short_description", "location", "is_remote",
                  "is_hybrid", "application_deadline"]:
        value = getattr(update, field, None)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value

    if update.company_id is not None:
        _ensure_company(update.company_id)
        updates.append("company_id = :company_id")
        params["company_id"] = update.company_id
    if update.job_type:
        updates.append("job_type = :job_type")
        params["job_type"] = update.job_type.value
    if update.status:
        updates.append("status = :status")
        params["status"] = update.status.value
    if update.skills_required is not None:
        updates.append("skills_required = :skills")
        params["skills"] = _clean_skills(update.skills_required)

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        db.execute(
            text(f"""
                UPDATE jobs SET {', '.join(updates)}, last_updated_by = :updated_by,
                    updated_at = CURRENT_TIMESTAMP
                WHERE job_id = :jid
            """),
            params
        )

    return _job_response(fetch_one(JOB_SELECT + " WHERE j.job_id = :jid", {"jid": job_id}))


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, admin: dict = Depends(get_current_admin)):
    """Delete a job posting."""
    with get_db_session() as db:
        result = db.execute(text("DELETE FROM jobs WHERE job_id = :jid"), {"jid": job_id})
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Job not found")

    return MessageResponse(message="Job deleted successfully")
