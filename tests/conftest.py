"""
Pytest configuration and shared fixtures.

MongoDB is replaced by mongomock (unique indexes included); PostgreSQL user
lookups are replaced by an in-memory participant directory.
"""

import pytest
import mongomock
from typing import Any, Dict

from aerojob.core.auth import create_access_token
from aerojob.db import mongodb
from aerojob.db.mongodb import COLLECTIONS, init_mongo_indexes
from aerojob.services.eligibility import EligibilityResolver
from aerojob.services.response_store import ResponseStore
from aerojob.services.survey_registry import SurveyRegistry


ADMIN_ID = 1
STUDENT_ID = 2
ALUMNI_ID = 3
OTHER_STUDENT_ID = 4


class InMemoryParticipants:
    """Stands in for the PostgreSQL-backed ParticipantDirectory."""

    def __init__(self):
        self.people: Dict[int, dict] = {}

    def add(self, user_id: int, email: str, first_name: str, last_name: str, role: str, is_active: bool = True):
        self.people[user_id] = {
            "user_id": user_id,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "role": role,
            "is_active": is_active,
        }

    def get_many(self, ids) -> Dict[Any, dict]:
        return {i: self.people[i] for i in ids if i in self.people}


@pytest.fixture
def participants() -> InMemoryParticipants:
    directory = InMemoryParticipants()
    directory.add(ADMIN_ID, "admin@aerojob.com", "Site", "Admin", "admin")
    directory.add(STUDENT_ID, "maria@student.edu", "Maria", "Santos", "student")
    directory.add(ALUMNI_ID, "jose@alumni.edu", "Jose", "Reyes", "alumni")
    directory.add(OTHER_STUDENT_ID, "ana@student.edu", "Ana", "Cruz", "student")
    return directory


@pytest.fixture
def mongo_db(monkeypatch):
    """Fresh in-memory database wired in as the app database, indexes built."""
    db = mongomock.MongoClient()["aerojob_test"]
    monkeypatch.setattr(mongodb, "_db", db)
    init_mongo_indexes(db)
    return db


@pytest.fixture
def responses(mongo_db, participants) -> ResponseStore:
    return ResponseStore(collection=mongo_db[COLLECTIONS["responses"]], participants=participants)


@pytest.fixture
def registry(mongo_db, responses) -> SurveyRegistry:
    return SurveyRegistry(collection=mongo_db[COLLECTIONS["surveys"]], responses=responses)


@pytest.fixture
def resolver(mongo_db, responses) -> EligibilityResolver:
    return EligibilityResolver(surveys=mongo_db[COLLECTIONS["surveys"]], responses=responses)


@pytest.fixture
def exit_survey_payload() -> dict:
    return {
        "title": "Exit Survey",
        "audience": "students",
        "status": "active",
        "questions": [
            {"text": "Did you enjoy the program?", "type": "rating", "required": True},
        ],
    }


@pytest.fixture
def feedback_survey_payload() -> dict:
    """Mixed question bank with optional and choice questions."""
    return {
        "title": "  Career Services Feedback ",
        "description": " Tell us how we did ",
        "audience": "all",
        "status": "active",
        "questions": [
            {"text": "Your current position", "type": "text", "required": True},
            {"text": "Which services did you use?", "type": "Multi-Select", "required": True,
             "options": [" Resume review ", "Mock interview", "", "Job fair"]},
            {"text": "Overall rating", "type": "stars", "required": False},
            {"text": "Anything else?", "type": "paragraph", "required": False},
        ],
    }


@pytest.fixture
def client(mongo_db, participants, monkeypatch):
    """TestClient with real JWTs; principals come from the in-memory directory."""
    from fastapi.testclient import TestClient
    from aerojob.core import auth
    from aerojob.main import app
    from aerojob.services.participants import get_participant_directory

    def load_principal(user_id):
        person = participants.people.get(user_id)
        if person is None:
            return None
        return {k: person[k] for k in ("user_id", "email", "role", "is_active")}

    monkeypatch.setattr(auth, "load_principal", load_principal)
    app.dependency_overrides[get_participant_directory] = lambda: participants

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def auth_headers(user_id: int, role: str) -> dict:
    token = create_access_token({"sub": str(user_id), "role": role})
    return {"Authorization": f"Bearer {token}"}
