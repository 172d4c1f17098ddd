"""ResponseStore: one response per participant, listings and CSV export."""

import csv
import io
import json
from datetime import datetime

import pytest
import mongomock
from bson import ObjectId
from pymongo.errors import OperationFailure

from aerojob.core.errors import ConflictError, InvalidReferenceError, NotFoundError
from aerojob.db import mongodb
from aerojob.db.mongodb import COLLECTIONS, dedupe_responses, init_mongo_indexes, migrate_legacy_responses
from aerojob.services.response_store import ResponseStore
from tests.conftest import ALUMNI_ID, OTHER_STUDENT_ID, STUDENT_ID


@pytest.fixture
def survey(registry, feedback_survey_payload):
    return registry.create(feedback_survey_payload, created_by=1)


@pytest.fixture
def answers(survey):
    qids = [q["id"] for q in survey["questions"]]
    return [
        {"question_id": qids[0], "value": "Engineer"},
        {"question_id": qids[1], "value": ["Job fair", "Mock interview"]},
        {"question_id": qids[2], "value": 5},
    ]


def test_submit_stores_canonical_document(responses, mongo_db, survey, answers):
    result = responses.submit(survey["id"], STUDENT_ID, answers)

    stored = mongo_db[COLLECTIONS["responses"]].find_one({"_id": ObjectId(result["id"])})
    assert stored["survey_id"] == ObjectId(survey["id"])
    assert stored["participant_id"] == STUDENT_ID
    assert isinstance(stored["answers"][0]["question_id"], ObjectId)
    assert result["survey_id"] == survey["id"]
    assert result["answers"] == answers


def test_second_submit_conflicts(responses, mongo_db, survey, answers):
    responses.submit(survey["id"], STUDENT_ID, answers)

    with pytest.raises(ConflictError) as exc:
        responses.submit(survey["id"], STUDENT_ID, answers)

    assert exc.value.message == "You have already answered this survey."
    assert mongo_db[COLLECTIONS["responses"]].count_documents({}) == 1


def test_unique_index_catches_a_raced_submit(responses, mongo_db, survey, answers, monkeypatch):
    responses.submit(survey["id"], STUDENT_ID, answers)
    # both requests passed the pre-check before either insert landed
    monkeypatch.setattr(responses, "has_responded", lambda *args: False)

    with pytest.raises(ConflictError):
        responses.submit(survey["id"], STUDENT_ID, answers)

    assert mongo_db[COLLECTIONS["responses"]].count_documents({}) == 1


def test_legacy_reference_blocks_new_submit(responses, mongo_db, survey, answers):
    mongo_db[COLLECTIONS["responses"]].insert_one(
        {"surveyId": ObjectId(survey["id"]), "user": STUDENT_ID, "answers": []}
    )
    assert responses.has_responded(survey["id"], STUDENT_ID)
    with pytest.raises(ConflictError):
        responses.submit(survey["id"], STUDENT_ID, answers)


def test_for_participant(responses, survey, answers):
    assert responses.for_participant(survey["id"], STUDENT_ID) is None

    responses.submit(survey["id"], STUDENT_ID, answers)

    mine = responses.for_participant(survey["id"], STUDENT_ID)
    assert mine["participant_id"] == STUDENT_ID
    assert responses.for_participant(survey["id"], ALUMNI_ID) is None


def test_for_survey_attaches_participants_and_filters(responses, survey, answers):
    responses.submit(survey["id"], STUDENT_ID, answers)
    responses.submit(survey["id"], ALUMNI_ID, answers)
    responses.submit(survey["id"], OTHER_STUDENT_ID, answers)

    rows = responses.for_survey(survey["id"])
    assert [r["participant_id"] for r in rows] == [OTHER_STUDENT_ID, ALUMNI_ID, STUDENT_ID]
    assert rows[1]["participant_email"] == "jose@alumni.edu"
    assert rows[1]["participant_name"] == "Jose Reyes"
    assert rows[1]["role"] == "alumni"

    students = responses.for_survey(survey["id"], role="Student")
    assert {r["participant_id"] for r in students} == {STUDENT_ID, OTHER_STUDENT_ID}

    only_one = responses.for_survey(survey["id"], participant_id=ALUMNI_ID)
    assert [r["participant_id"] for r in only_one] == [ALUMNI_ID]


def test_for_survey_includes_legacy_documents(responses, mongo_db, survey):
    mongo_db[COLLECTIONS["responses"]].insert_one(
        {"survey": ObjectId(survey["id"]), "participant_id": ALUMNI_ID, "answers": []}
    )
    rows = responses.for_survey(survey["id"])
    assert len(rows) == 1
    assert rows[0]["survey_id"] == survey["id"]
    assert rows[0]["participant_email"] == "jose@alumni.edu"


def test_delete_single_response(responses, survey, answers):
    result = responses.submit(survey["id"], STUDENT_ID, answers)

    responses.delete(result["id"])

    assert responses.for_survey(survey["id"]) == []
    with pytest.raises(NotFoundError):
        responses.delete(result["id"])
    with pytest.raises(InvalidReferenceError):
        responses.delete("bogus")

    # participant may answer again once their response is gone
    responses.submit(survey["id"], STUDENT_ID, answers)


def test_export_csv_quotes_every_field(responses, participants, survey, answers):
    participants.add(9, "odd@student.edu", 'Ann "AJ"', "Lee, Jr.", "student")
    responses.submit(survey["id"], 9, answers)
    responses.submit(survey["id"], STUDENT_ID, answers[:2])

    content = responses.export_csv(survey["id"]).decode("utf-8")
    lines = content.split("\n")

    assert lines[0] == '"_id","createdAt","userEmail","userName","role","answers"'
    assert all(line.startswith('"') for line in lines if line)
    assert '"Ann ""AJ"" Lee, Jr."' in content

    rows = list(csv.reader(io.StringIO(content)))
    assert len(rows) == 3
    newest = rows[1]
    assert newest[2] == "maria@student.edu"
    assert newest[3] == "Maria Santos"
    assert newest[4] == "student"
    assert json.loads(newest[5]) == answers[:2]
    assert json.loads(rows[2][5])[2]["value"] == 5


def test_export_csv_without_responses(responses, survey):
    content = responses.export_csv(survey["id"]).decode("utf-8")
    assert content == '"_id","createdAt","userEmail","userName","role","answers"\n'


def test_migrate_legacy_responses_before_unique_index():
    db = mongomock.MongoClient()["legacy"]
    collection = db[COLLECTIONS["responses"]]
    survey_a, survey_b = ObjectId(), ObjectId()
    collection.insert_many([
        {"survey": survey_a, "user": 7, "answers": []},
        {"surveyId": survey_b, "userId": 7, "answers": []},
        {"survey_id": survey_a, "participant_id": 8, "answers": []},
    ])

    assert migrate_legacy_responses(db) == 2
    init_mongo_indexes(db)

    docs = list(collection.find({"participant_id": 7}))
    assert {d["survey_id"] for d in docs} == {survey_a, survey_b}
    assert all("survey" not in d and "userId" not in d for d in docs)
    assert migrate_legacy_responses(db) == 0


def test_duplicate_legacy_responses_keep_the_earliest():
    db = mongomock.MongoClient()["legacy_dupes"]
    collection = db[COLLECTIONS["responses"]]
    survey_id = ObjectId()
    collection.insert_many([
        {"survey": survey_id, "user": 7, "userId": 7, "answers": [{"value": "second"}],
         "createdAt": datetime(2024, 3, 2)},
        {"survey": survey_id, "user": 7, "userId": 7, "answers": [{"value": "first"}],
         "createdAt": datetime(2024, 3, 1)},
        {"surveyId": survey_id, "userId": 7, "answers": [{"value": "third"}],
         "createdAt": datetime(2024, 3, 3)},
        {"survey": survey_id, "user": 8, "answers": [{"value": "other participant"}]},
    ])

    init_mongo_indexes(db)

    kept = list(collection.find({"participant_id": 7}))
    assert len(kept) == 1
    assert kept[0]["answers"] == [{"value": "first"}]
    assert collection.count_documents({}) == 2
    assert "uniq_survey_participant" in collection.index_information()

    store = ResponseStore(collection=collection)
    with pytest.raises(ConflictError):
        store.submit(survey_id, 7, [])


def test_dedupe_is_a_no_op_on_clean_data(responses, mongo_db, survey, answers):
    responses.submit(survey["id"], STUDENT_ID, answers)
    responses.submit(survey["id"], ALUMNI_ID, answers)

    assert dedupe_responses(mongo_db) == 0
    assert mongo_db[COLLECTIONS["responses"]].count_documents({}) == 2


def test_failed_unique_index_build_is_raised(monkeypatch):
    db = mongomock.MongoClient()["legacy_unfixed"]
    survey_id = ObjectId()
    db[COLLECTIONS["responses"]].insert_many([
        {"survey_id": survey_id, "participant_id": 7, "answers": []},
        {"survey_id": survey_id, "participant_id": 7, "answers": []},
    ])
    monkeypatch.setattr(mongodb, "dedupe_responses", lambda db=None: 0)

    with pytest.raises(OperationFailure):
        init_mongo_indexes(db)
