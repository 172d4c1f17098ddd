"""
Eligibility Resolver

A participant may see a survey when:
- the survey is active, and
- its audience is 'all' or falls in the participant's role bucket, and
- the participant has not answered it yet (anonymous callers skip this).

The same test backs the single-survey detail fetch, which reports an
ineligible survey as not found.
"""

from typing import Any, List, Optional

from pymongo.collection import Collection

from aerojob.core.errors import NotFoundError
from aerojob.db.mongodb import get_collection, COLLECTIONS
from aerojob.models.survey import audiences_for_role, parse_object_id, serialize_survey
from aerojob.services.response_store import ResponseStore
from aerojob.services.survey_registry import NEWEST_FIRST


def visibility_filter(role: Optional[str]) -> dict:
    """Active surveys whose audience the role can see."""
    return {
        # status regex tolerates mixed-case values on older documents
        "status": {"$regex": "^active$", "$options": "i"},
        "audience": {"$in": audiences_for_role(role)},
    }


class EligibilityResolver:
    def __init__(self, surveys: Collection = None, responses: ResponseStore = None):
        self.surveys: Collection = (
            surveys if surveys is not None else get_collection(COLLECTIONS["surveys"])
        )
        self.responses = responses if responses is not None else ResponseStore()

    def eligible_surveys(self, participant_id: Any = None, role: Optional[str] = None) -> List[dict]:
        """
        Surveys the participant may take, newest first.

        Args:
            participant_id: None for an anonymous caller
            role: Participant role ('student', 'alumni', ...)
        """
        cursor = self.surveys.find(visibility_filter(role)).sort(NEWEST_FIRST)
        surveys = [serialize_survey(doc) for doc in cursor]
        if participant_id is None:
            return surveys

        answered = self.responses.answered_survey_ids(participant_id)
        return [s for s in surveys if s["id"] not in answered]

    def visible_survey(self, survey_id: Any, role: Optional[str] = None) -> dict:
        """
        The survey if it is active and targets the role, ignoring whether it
        was already answered.

        Raises:
            NotFoundError: absent, inactive or aimed at another audience
        """
        oid = parse_object_id(survey_id, "survey id")
        doc = self.surveys.find_one({"_id": oid, **visibility_filter(role)})
        if not doc:
            raise NotFoundError("Survey not found")
        return serialize_survey(doc)

    def eligible_survey(self, survey_id: Any, participant_id: Any = None, role: Optional[str] = None) -> dict:
        """
        Detail fetch for non-admins.

        Raises:
            NotFoundError: the survey fails the eligibility test, including
                when the participant already answered it
        """
        survey = self.visible_survey(survey_id, role)
        if participant_id is not None and self.responses.has_responded(survey["id"], participant_id):
            raise NotFoundError("Survey not found")
        return survey


def get_eligibility_resolver() -> EligibilityResolver:
    return EligibilityResolver()
