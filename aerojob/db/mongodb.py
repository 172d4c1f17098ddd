"""
MongoDB Connection Utility

MongoDB stores:
- Surveys (metadata + embedded question bank)
- Survey responses (one per survey and participant)
- Search logs (best-effort analytics)

WHY MongoDB for these?
- Schema-flexible: question banks and answer values vary per survey
- Document-oriented: a survey owns its questions, no joins needed
- Unique compound indexes give us the one-response-per-participant rule
"""
import logging
from datetime import datetime

from bson import ObjectId
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.errors import OperationFailure
from pymongo.database import Database
from pymongo.collection import Collection
from aerojob.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the aerojob_docs database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """
    Get a specific collection.
    Collections we'll use:
    - surveys: Survey documents with embedded questions
    - survey_responses: Submitted answers
    - search_logs: Job search terms
    """
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "surveys": "surveys",
    "responses": "survey_responses",
    "search_logs": "search_logs",
}

# Response -> survey / participant links. Older documents carry one of the
# legacy field names instead of (or alongside) the canonical one.
RESPONSE_SURVEY_FIELD = "survey_id"
RESPONSE_PARTICIPANT_FIELD = "participant_id"
LEGACY_SURVEY_FIELDS = ("survey", "surveyId")
LEGACY_PARTICIPANT_FIELDS = ("user", "userId")


def migrate_legacy_responses(db: Database = None) -> int:
    """
    Copy legacy reference fields into the canonical ones and drop the
    legacy copies. Must run before the unique index is built.

    Returns:
        Number of response documents rewritten.
    """
    db = db if db is not None else get_mongo_db()
    collection = db[COLLECTIONS["responses"]]
    legacy_fields = LEGACY_SURVEY_FIELDS + LEGACY_PARTICIPANT_FIELDS

    cursor = collection.find({"$or": [{f: {"$exists": True}} for f in legacy_fields]})
    migrated = 0
    for doc in cursor:
        updates = {}
        if doc.get(RESPONSE_SURVEY_FIELD) is None:
            for field in LEGACY_SURVEY_FIELDS:
                if doc.get(field) is not None:
                    updates[RESPONSE_SURVEY_FIELD] = doc[field]
                    break
        if doc.get(RESPONSE_PARTICIPANT_FIELD) is None:
            for field in LEGACY_PARTICIPANT_FIELDS:
                if doc.get(field) is not None:
                    updates[RESPONSE_PARTICIPANT_FIELD] = doc[field]
                    break

        change = {"$unset": {f: "" for f in legacy_fields if f in doc}}
        if updates:
            change["$set"] = updates
        collection.update_one({"_id": doc["_id"]}, change)
        migrated += 1

    if migrated:
        logger.info("Migrated %d survey responses off legacy reference fields", migrated)
    return migrated


def _response_time(doc: dict) -> datetime:
    created = doc.get("created_at") or doc.get("createdAt")
    if isinstance(created, datetime):
        return created.replace(tzinfo=None)
    if isinstance(doc.get("_id"), ObjectId):
        return doc["_id"].generation_time.replace(tzinfo=None)
    return datetime.min


def dedupe_responses(db: Database = None) -> int:
    """
    Keep the earliest response per (survey_id, participant_id) and delete
    the rest. Responses written before the unique index existed may repeat.

    Returns:
        Number of duplicate responses removed.
    """
    db = db if db is not None else get_mongo_db()
    collection = db[COLLECTIONS["responses"]]
    fields = {RESPONSE_SURVEY_FIELD: 1, RESPONSE_PARTICIPANT_FIELD: 1, "created_at": 1, "createdAt": 1}

    docs = sorted(collection.find({}, projection=fields), key=lambda d: (_response_time(d), str(d["_id"])))
    seen = set()
    duplicates = []
    for doc in docs:
        key = (repr(doc.get(RESPONSE_SURVEY_FIELD)), repr(doc.get(RESPONSE_PARTICIPANT_FIELD)))
        if key in seen:
            duplicates.append(doc["_id"])
        else:
            seen.add(key)

    if duplicates:
        collection.delete_many({"_id": {"$in": duplicates}})
        logger.warning("Removed %d duplicate survey responses (kept the earliest of each)", len(duplicates))
    return len(duplicates)


def init_mongo_indexes(db: Database = None):
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = db if db is not None else get_mongo_db()

    # Eligibility lookups: active surveys for an audience, newest first
    db[COLLECTIONS["surveys"]].create_index([
        ("status", ASCENDING),
        ("audience", ASCENDING),
        ("created_at", DESCENDING)
    ])

    # Legacy documents must be canonical and unique before the unique index is built
    migrate_legacy_responses(db)
    dedupe_responses(db)

    # One response per survey and participant (source of truth for submits)
    try:
        db[COLLECTIONS["responses"]].create_index([
            (RESPONSE_SURVEY_FIELD, ASCENDING),
            (RESPONSE_PARTICIPANT_FIELD, ASCENDING)
        ], unique=True, name="uniq_survey_participant")
    except OperationFailure as e:
        logger.error("Could not build uniq_survey_participant: %s", e)
        raise
    db[COLLECTIONS["responses"]].create_index(RESPONSE_PARTICIPANT_FIELD)

    db[COLLECTIONS["search_logs"]].create_index([
        ("term", ASCENDING),
        ("created_at", DESCENDING)
    ])

    logger.info("MongoDB indexes created successfully")
