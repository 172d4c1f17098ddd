"""
MongoDB Service - the search log collection.

Survey-specific collections have their own services:
- surveys            -> aerojob.services.survey_registry
- survey_responses   -> aerojob.services.response_store
"""

import logging
from datetime import datetime
from typing import Optional
from pymongo.collection import Collection

from aerojob.db.mongodb import get_collection, COLLECTIONS

logger = logging.getLogger(__name__)


# ============================================================
# SEARCH LOGS COLLECTION
# Job search terms, for analytics. Writes are best-effort.
# ============================================================

class SearchLogService:
    """
    Records what people search for on the job board.
    """

    ROLES = ("student", "alumni", "admin", "guest")

    def __init__(self, collection: Collection = None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["search_logs"])
        )

    def insert(self, term: str, user_id: Optional[int] = None, role: Optional[str] = None) -> Optional[str]:
        """
        Insert a search log entry.

        Args:
            term: Raw search term (trimmed and lower-cased before storing)
            user_id: Searching user, None for anonymous
            role: Searching user's role, 'guest' when unknown

        Returns:
            MongoDB ObjectId as string, or None for a blank term
        """
        term = (term or "").strip().lower()
        if not term:
            return None

        role = (role or "guest").strip().lower()
        if role not in self.ROLES:
            role = "guest"

        doc = {
            "term": term,
            "user_id": user_id,
            "role": role,
            "created_at": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)


def log_search_term(term: str, user_id: Optional[int] = None, role: Optional[str] = None) -> bool:
    """
    Best-effort search logging: never raises.

    Returns:
        True if the term was stored.
    """
    try:
        return SearchLogService().insert(term, user_id=user_id, role=role) is not None
    except Exception as e:
        logger.debug("Search term logging failed: %s", e)
        return False
