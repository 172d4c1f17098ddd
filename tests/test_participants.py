"""ParticipantDirectory lookups."""

from aerojob.services import participants as participants_module
from aerojob.services.participants import ParticipantDirectory


def test_get_many_skips_non_integer_ids(monkeypatch):
    calls = []

    def fake_sql(sql, params=None):
        calls.append(params)
        return [{"user_id": 2, "email": "maria@student.edu", "first_name": "Maria",
                 "last_name": "Santos", "role": "student"}]

    monkeypatch.setattr(participants_module, "execute_raw_sql", fake_sql)

    people = ParticipantDirectory().get_many([2, "3", "65f0c0ffee0000000000abcd", None])

    assert calls == [{"ids": [2, 3]}]
    assert people[2]["email"] == "maria@student.edu"


def test_get_many_without_usable_ids_skips_query(monkeypatch):
    monkeypatch.setattr(participants_module, "execute_raw_sql", lambda *a, **k: 1 / 0)

    assert ParticipantDirectory().get_many(["legacy-user"]) == {}
