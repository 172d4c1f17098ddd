"""
Survey Routes

GET    /surveys                          - List surveys (admin; status, q filters)
POST   /surveys                          - Create survey (admin)
GET    /surveys/active/eligible          - Surveys the caller may take (anonymous allowed)
GET    /surveys/{survey_id}              - Survey detail (admin: any; others: only if eligible)
PUT    /surveys/{survey_id}              - Update survey (admin)
DELETE /surveys/{survey_id}              - Delete survey and its responses (admin)
POST   /surveys/{survey_id}/responses    - Submit answers (authenticated)
GET    /surveys/{survey_id}/my-response  - Caller's own response or null
GET    /surveys/{survey_id}/responses    - List responses (admin; role, participant_id filters)
GET    /surveys/{survey_id}/responses/export - CSV export (admin)
DELETE /survey-responses/{response_id}   - Delete one response (admin)
"""

from fastapi import APIRouter, Depends, Query, Response
from typing import List, Optional

from aerojob.core.auth import get_current_user, get_current_admin, get_optional_user, is_admin
from aerojob.services.survey_registry import SurveyRegistry
from aerojob.services.eligibility import EligibilityResolver
from aerojob.services.response_store import ResponseStore
from aerojob.services.response_validator import validate_answers
from aerojob.services.participants import get_participant_directory
from aerojob.schemas.schemas import (
    SurveyInput, SurveyResponse, SubmissionRequest, SubmissionResponse, MessageResponse
)

router = APIRouter(tags=["Surveys"])


# ============================================================
# SERVICE PROVIDERS (overridable in tests)
# ============================================================

def get_response_store(participants=Depends(get_participant_directory)) -> ResponseStore:
    return ResponseStore(participants=participants)


def get_registry(responses: ResponseStore = Depends(get_response_store)) -> SurveyRegistry:
    return SurveyRegistry(responses=responses)


def get_resolver(responses: ResponseStore = Depends(get_response_store)) -> EligibilityResolver:
    return EligibilityResolver(responses=responses)


# ============================================================
# ADMIN: list + create
# ============================================================

@router.get("/surveys", response_model=List[SurveyResponse])
async def list_surveys(
    status: Optional[str] = Query(None, description="Exact status, case-insensitive"),
    q: Optional[str] = Query(None, description="Search in title"),
    admin: dict = Depends(get_current_admin),
    registry: SurveyRegistry = Depends(get_registry)
):
    """List all surveys, newest first. Admin only."""
    return registry.list(status=status, q=q)


@router.post("/surveys", response_model=SurveyResponse, status_code=201)
async def create_survey(
    payload: SurveyInput,
    admin: dict = Depends(get_current_admin),
    registry: SurveyRegistry = Depends(get_registry)
):
    """
    Create a survey. Admin only.

    Type, status and audience accept common synonyms (e.g. "radio",
    "Multi-Select", "alumnus"). Status defaults to draft.
    """
    return registry.create(payload.model_dump(), created_by=admin["user_id"])


# ============================================================
# PARTICIPANTS: eligible surveys (must be above /surveys/{survey_id})
# ============================================================

@router.get("/surveys/active/eligible", response_model=List[SurveyResponse])
async def list_eligible_surveys(
    user: Optional[dict] = Depends(get_optional_user),
    resolver: EligibilityResolver = Depends(get_resolver)
):
    """Active surveys for the caller's audience that they have not answered yet."""
    if user is None:
        return resolver.eligible_surveys(participant_id=None, role=None)
    return resolver.eligible_surveys(participant_id=user["user_id"], role=user["role"])


# ============================================================
# READ / UPDATE / DELETE
# ============================================================

@router.get("/surveys/{survey_id}", response_model=SurveyResponse)
async def get_survey(
    survey_id: str,
    user: Optional[dict] = Depends(get_optional_user),
    registry: SurveyRegistry = Depends(get_registry),
    resolver: EligibilityResolver = Depends(get_resolver)
):
    """
    Survey detail.

    Admins see any survey. Everyone else gets 404 unless the survey is
    active, targets their audience and they have not answered it yet.
    """
    if is_admin(user):
        return registry.get(survey_id)

    if user is None:
        return resolver.eligible_survey(survey_id)
    return resolver.eligible_survey(survey_id, participant_id=user["user_id"], role=user["role"])


@router.put("/surveys/{survey_id}", response_model=SurveyResponse)
async def update_survey(
    survey_id: str,
    payload: SurveyInput,
    admin: dict = Depends(get_current_admin),
    registry: SurveyRegistry = Depends(get_registry)
):
    """Replace a survey's definition. Admin only."""
    return registry.update(survey_id, payload.model_dump())


@router.delete("/surveys/{survey_id}", response_model=MessageResponse)
async def delete_survey(
    survey_id: str,
    admin: dict = Depends(get_current_admin),
    registry: SurveyRegistry = Depends(get_registry)
):
    """Delete a survey. Cascades to all of its responses."""
    removed = registry.delete(survey_id)
    return MessageResponse(message=f"Survey deleted ({removed} responses removed)")


# ============================================================
# RESPONSES
# ============================================================

@router.post("/surveys/{survey_id}/responses", response_model=SubmissionResponse, status_code=201)
async def submit_response(
    survey_id: str,
    submission: SubmissionRequest,
    user: dict = Depends(get_current_user),
    resolver: EligibilityResolver = Depends(get_resolver),
    store: ResponseStore = Depends(get_response_store)
):
    """
    Submit answers to an active survey.

    400 if a required question is left empty, 404 if the survey is not
    active or not aimed at the caller, 403 if the caller already answered.
    """
    survey = resolver.visible_survey(survey_id, role=user["role"])
    answers = validate_answers(survey, submission.answers)
    return store.submit(survey["id"], user["user_id"], answers)


@router.get("/surveys/{survey_id}/my-response", response_model=Optional[SubmissionResponse])
async def get_my_response(
    survey_id: str,
    user: dict = Depends(get_current_user),
    store: ResponseStore = Depends(get_response_store)
):
    """The caller's own response to this survey, or null."""
    return store.for_participant(survey_id, user["user_id"])


@router.get("/surveys/{survey_id}/responses", response_model=List[SubmissionResponse])
async def list_responses(
    survey_id: str,
    role: Optional[str] = Query(None, description="Participant role"),
    participant_id: Optional[int] = Query(None),
    admin: dict = Depends(get_current_admin),
    registry: SurveyRegistry = Depends(get_registry),
    store: ResponseStore = Depends(get_response_store)
):
    """List responses to a survey, newest first. Admin only."""
    registry.get(survey_id)
    return store.for_survey(survey_id, role=role, participant_id=participant_id)


@router.get("/surveys/{survey_id}/responses/export")
async def export_responses(
    survey_id: str,
    admin: dict = Depends(get_current_admin),
    registry: SurveyRegistry = Depends(get_registry),
    store: ResponseStore = Depends(get_response_store)
):
    """Download all responses as CSV. Admin only."""
    registry.get(survey_id)
    return Response(
        content=store.export_csv(survey_id),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="responses.csv"'}
    )


@router.delete("/survey-responses/{response_id}", response_model=MessageResponse)
async def delete_response(
    response_id: str,
    admin: dict = Depends(get_current_admin),
    store: ResponseStore = Depends(get_response_store)
):
    """Remove a single response. Admin only."""
    store.delete(response_id)
    return MessageResponse(message="Response deleted successfully")
