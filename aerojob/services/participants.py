"""
Participant Directory - read-only view of users for survey listings and exports.

Responses only hold a participant id; email, name and role are looked up
from PostgreSQL at read time so exports reflect the current user record.
"""

from typing import Any, Dict, Iterable

from aerojob.db.postgres import execute_raw_sql


class ParticipantDirectory:
    """Looks up participants in the users table."""

    def get_many(self, ids: Iterable[Any]) -> Dict[int, dict]:
        """
        Fetch participants by id.

        Ids that are not integers (e.g. left over from an older user store)
        are skipped.

        Returns:
            {user_id: {"user_id", "email", "first_name", "last_name", "role"}}
        """
        user_ids = []
        for value in ids:
            try:
                user_ids.append(int(value))
            except (TypeError, ValueError):
                continue
        if not user_ids:
            return {}

        rows = execute_raw_sql(
            """
            SELECT user_id, email, first_name, last_name, role
            FROM users WHERE user_id = ANY(:ids)
            """,
            {"ids": user_ids}
        )
        return {row["user_id"]: row for row in rows}


def get_participant_directory() -> ParticipantDirectory:
    return ParticipantDirectory()
