"""
Analytics Routes

POST /analytics/search - Log a job search term (anonymous allowed)
"""

from fastapi import APIRouter, HTTPException, Depends
from typing import Optional

from aerojob.core.auth import get_optional_user
from aerojob.services.mongo_service import log_search_term
from aerojob.schemas.schemas import SearchLogRequest, MessageResponse

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.post("/search", response_model=MessageResponse)
async def log_search(request: SearchLogRequest, user: Optional[dict] = Depends(get_optional_user)):
    """
    Record a search term. Logged in users are attributed by id and role;
    anonymous callers may pass a role hint, otherwise 'guest'.
    """
    if not request.term.strip():
        raise HTTPException(status_code=400, detail="term required")

    if user:
        log_search_term(request.term, user_id=user["user_id"], role=user["role"])
    else:
        log_search_term(request.term, role=request.role)

    return MessageResponse(message="ok")
