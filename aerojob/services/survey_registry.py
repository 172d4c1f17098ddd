"""
Survey Registry - CRUD over the surveys collection.

All client input goes through normalize_survey_payload() before it is
stored, so documents written here always hold canonical type / status /
audience values.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.collection import Collection

from aerojob.core.errors import NotFoundError
from aerojob.db.mongodb import get_collection, COLLECTIONS
from aerojob.models.survey import (
    normalize_survey_payload,
    parse_object_id,
    serialize_survey,
)
from aerojob.services.response_store import ResponseStore

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


class SurveyRegistry:
    """
    Owns survey documents and their embedded question banks.
    Deleting a survey also deletes its responses.
    """

    def __init__(self, collection: Collection = None, responses: ResponseStore = None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["surveys"])
        )
        self.responses = responses if responses is not None else ResponseStore()

    def create(self, payload: Dict[str, Any], created_by: Optional[int] = None) -> dict:
        """
        Create a survey.

        Raises:
            SurveyValidationError: blank title / question text, unknown status or audience
        """
        doc = normalize_survey_payload(payload)
        now = datetime.utcnow()
        doc.update({"created_by": created_by, "created_at": now, "updated_at": now})

        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("Survey %s created (%s, audience=%s)", doc["_id"], doc["status"], doc["audience"])
        return serialize_survey(doc)

    def update(self, survey_id: Any, payload: Dict[str, Any]) -> dict:
        """
        Replace a survey's definition. Question ids echoed back by the
        client are kept; new questions get fresh ids.

        Raises:
            NotFoundError: no such survey
        """
        oid = parse_object_id(survey_id, "survey id")
        existing = self.collection.find_one({"_id": oid})
        if not existing:
            raise NotFoundError("Survey not found")

        changes = normalize_survey_payload(payload, existing)
        changes["updated_at"] = datetime.utcnow()

        doc = self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundError("Survey not found")

        if existing.get("status") != doc.get("status"):
            logger.info("Survey %s status %s -> %s", oid, existing.get("status"), doc.get("status"))
        return serialize_survey(doc)

    def delete(self, survey_id: Any) -> int:
        """
        Delete a survey and cascade to its responses.

        Returns:
            Number of responses removed.
        """
        oid = parse_object_id(survey_id, "survey id")
        result = self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError("Survey not found")

        removed = self.responses.delete_for_survey(oid)
        logger.info("Survey %s deleted with %d responses", oid, removed)
        return removed

    def get(self, survey_id: Any) -> dict:
        oid = parse_object_id(survey_id, "survey id")
        doc = self.collection.find_one({"_id": oid})
        if not doc:
            raise NotFoundError("Survey not found")
        return serialize_survey(doc)

    def list(self, status: Optional[str] = None, q: Optional[str] = None) -> List[dict]:
        """
        Admin listing, newest first.

        Args:
            status: Exact status, case-insensitive
            q: Substring of the title, case-insensitive
        """
        query = {}
        if status and status.strip():
            query["status"] = {"$regex": f"^{re.escape(status.strip())}$", "$options": "i"}
        if q and q.strip():
            query["title"] = {"$regex": re.escape(q.strip()), "$options": "i"}

        cursor = self.collection.find(query).sort(NEWEST_FIRST)
        return [serialize_survey(doc) for doc in cursor]


def get_survey_registry() -> SurveyRegistry:
    return SurveyRegistry()
