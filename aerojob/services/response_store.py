"""
Survey Response Store

One document per (survey, participant):

{
    "_id": ObjectId,
    "survey_id": ObjectId,
    "participant_id": 42,
    "answers": [{"question_id": ObjectId, "value": "..." | 5 | ["a", "b"]}],
    "created_at": datetime
}

The unique index uniq_survey_participant (see aerojob.db.mongodb) is what
guarantees a single response per participant; the find_one pre-check in
submit() only saves a round trip in the common case.

Older documents may still reference the survey/participant through the
legacy fields "survey", "surveyId", "user" and "userId". Every query here
matches the union of the canonical and legacy fields.
"""

import csv
import io
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from aerojob.core.errors import ConflictError, NotFoundError
from aerojob.db.mongodb import (
    get_collection,
    COLLECTIONS,
    RESPONSE_SURVEY_FIELD,
    RESPONSE_PARTICIPANT_FIELD,
    LEGACY_SURVEY_FIELDS,
    LEGACY_PARTICIPANT_FIELDS,
)
from aerojob.models.survey import parse_object_id

logger = logging.getLogger(__name__)

SURVEY_FIELDS = (RESPONSE_SURVEY_FIELD,) + LEGACY_SURVEY_FIELDS
PARTICIPANT_FIELDS = (RESPONSE_PARTICIPANT_FIELD,) + LEGACY_PARTICIPANT_FIELDS

CSV_HEADERS = ["_id", "createdAt", "userEmail", "userName", "role", "answers"]


def survey_match(survey_oid: ObjectId) -> dict:
    """Filter matching a survey through any of its reference fields."""
    return {"$or": [{field: survey_oid} for field in SURVEY_FIELDS]}


def participant_match(participant_id: Any) -> dict:
    """Filter matching a participant through any of its reference fields."""
    return {"$or": [{field: participant_id} for field in PARTICIPANT_FIELDS]}


def _first_present(doc: dict, fields) -> Any:
    for field in fields:
        if doc.get(field) is not None:
            return doc[field]
    return None


def participant_name(participant: Optional[dict]) -> str:
    if not participant:
        return ""
    parts = [participant.get("first_name"), participant.get("last_name")]
    return " ".join(p for p in parts if p)


def serialize_answers(answers: List[dict]) -> List[dict]:
    return [
        {"question_id": str(a.get("question_id", a.get("questionId"))), "value": a.get("value")}
        for a in answers or []
    ]


def serialize_response(doc: dict, participant: Optional[dict] = None) -> dict:
    """Convert a stored response to a JSON-friendly dict."""
    survey_ref = _first_present(doc, SURVEY_FIELDS)
    participant_ref = _first_present(doc, PARTICIPANT_FIELDS)
    if participant_ref is not None and not isinstance(participant_ref, int):
        participant_ref = str(participant_ref)
    result = {
        "id": str(doc["_id"]),
        "survey_id": str(survey_ref) if survey_ref is not None else None,
        "participant_id": participant_ref,
        "answers": serialize_answers(doc.get("answers")),
        "created_at": doc.get("created_at") or doc.get("createdAt"),
    }
    if participant is not None:
        result["participant_email"] = participant.get("email")
        result["participant_name"] = participant_name(participant)
        result["role"] = participant.get("role")
    return result


class ResponseStore:
    """
    Persists survey responses and answers admin queries over them.

    Args:
        collection: survey_responses collection (defaults to the app database)
        participants: object with get_many(ids) -> {id: participant dict},
            used to attach email / name / role to listings and exports
    """

    def __init__(self, collection: Collection = None, participants=None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["responses"])
        )
        self.participants = participants

    # --------------------------------------------------------
    # Lookups
    # --------------------------------------------------------

    def has_responded(self, survey_id: Any, participant_id: Any) -> bool:
        survey_oid = parse_object_id(survey_id, "survey id")
        doc = self.collection.find_one(
            {"$and": [survey_match(survey_oid), participant_match(participant_id)]},
            projection={"_id": 1},
        )
        return doc is not None

    def answered_survey_ids(self, participant_id: Any) -> Set[str]:
        """Ids of every survey this participant has answered, across all reference fields."""
        answered = set()
        query = participant_match(participant_id)
        for field in SURVEY_FIELDS:
            for value in self.collection.distinct(field, query):
                if value is not None:
                    answered.add(str(value))
        return answered

    def for_participant(self, survey_id: Any, participant_id: Any) -> Optional[dict]:
        """The participant's own response to a survey, or None."""
        survey_oid = parse_object_id(survey_id, "survey id")
        doc = self.collection.find_one(
            {"$and": [survey_match(survey_oid), participant_match(participant_id)]}
        )
        return serialize_response(doc) if doc else None

    def for_survey(self, survey_id: Any, role: Optional[str] = None, participant_id: Any = None) -> List[dict]:
        """
        Responses to a survey, newest first.

        Args:
            survey_id: Survey id string
            role: Keep only responses whose participant has this role
            participant_id: Keep only this participant's response
        """
        survey_oid = parse_object_id(survey_id, "survey id")
        query = survey_match(survey_oid)
        if participant_id is not None:
            query = {"$and": [query, participant_match(participant_id)]}

        docs = list(self.collection.find(query).sort([("created_at", -1), ("_id", -1)]))
        people = self._participants_for(docs)

        results = []
        for doc in docs:
            participant = people.get(_first_present(doc, PARTICIPANT_FIELDS), {})
            if role and str(participant.get("role") or "").lower() != role.strip().lower():
                continue
            results.append(serialize_response(doc, participant))
        return results

    def _participants_for(self, docs: List[dict]) -> Dict[Any, dict]:
        if self.participants is None:
            return {}
        ids = {_first_present(doc, PARTICIPANT_FIELDS) for doc in docs}
        ids.discard(None)
        if not ids:
            return {}
        return self.participants.get_many(sorted(ids, key=str))

    # --------------------------------------------------------
    # Writes
    # --------------------------------------------------------

    def submit(self, survey_id: Any, participant_id: Any, answers: List[dict]) -> dict:
        """
        Store a participant's answers.

        Args:
            survey_id: Survey id string
            participant_id: Authenticated participant id
            answers: Normalized answers from validate_answers()

        Raises:
            ConflictError: participant already answered this survey
        """
        survey_oid = parse_object_id(survey_id, "survey id")

        if self.has_responded(survey_oid, participant_id):
            raise ConflictError("You have already answered this survey.")

        doc = {
            RESPONSE_SURVEY_FIELD: survey_oid,
            RESPONSE_PARTICIPANT_FIELD: participant_id,
            "answers": [
                {"question_id": ObjectId(a["question_id"]), "value": a["value"]}
                for a in answers
            ],
            "created_at": datetime.utcnow(),
        }
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            # lost the race against a concurrent submit
            raise ConflictError("You have already answered this survey.")

        doc["_id"] = result.inserted_id
        logger.info("Participant %s answered survey %s", participant_id, survey_oid)
        return serialize_response(doc)

    def delete(self, response_id: Any) -> None:
        """Admin removal of a single response."""
        oid = parse_object_id(response_id, "response id")
        result = self.collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundError("Response not found")

    def delete_for_survey(self, survey_id: Any) -> int:
        """Cascade: remove every response that references a survey."""
        survey_oid = parse_object_id(survey_id, "survey id")
        result = self.collection.delete_many(survey_match(survey_oid))
        return result.deleted_count

    # --------------------------------------------------------
    # Export
    # --------------------------------------------------------

    def export_csv(self, survey_id: Any) -> bytes:
        """
        One row per response: id, createdAt, participant email / name /
        role as of now, and the answers as a JSON blob. Every field is quoted.
        """
        rows = self.for_survey(survey_id)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for row in rows:
            created_at = row.get("created_at")
            writer.writerow([
                row["id"],
                created_at.isoformat() if isinstance(created_at, datetime) else (created_at or ""),
                row.get("participant_email") or "",
                row.get("participant_name") or "",
                row.get("role") or "",
                json.dumps(row["answers"], default=str),
            ])
        return buffer.getvalue().encode("utf-8")
