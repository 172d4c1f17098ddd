"""
Database module.

PostgreSQL holds users, companies and jobs; MongoDB holds surveys,
survey responses and search logs.
"""
from aerojob.db.postgres import get_db_session, execute_raw_sql, fetch_one, test_postgres_connection
from aerojob.db.mongodb import (
    COLLECTIONS,
    get_collection,
    get_mongo_db,
    init_mongo_indexes,
    migrate_legacy_responses,
    test_mongo_connection,
)

__all__ = [
    "COLLECTIONS",
    "execute_raw_sql",
    "fetch_one",
    "get_collection",
    "get_db_session",
    "get_mongo_db",
    "init_mongo_indexes",
    "migrate_legacy_responses",
    "test_mongo_connection",
    "test_postgres_connection",
]
