"""
Response Validator - turns a raw answer payload into normalized answers.

Accepted entry shapes (may be mixed in one payload):
- explicit:   {"questionId": "<id>", "value": ...}  ("qid" / "question_id" also accepted)
- positional: the i-th entry answers the i-th question. Either a bare value
  or {"value": ...} without an id. Older clients send a flat value array.

Entries that do not resolve to a question of the survey are dropped. If a
question is answered twice the last value wins.

Values are checked against the question type and stored as given, without
coercion:
- short_text / long_text: text or a number
- rating: a number, or text that parses as one
- multiple_choice: one of the question's options
- checkbox: a list of the question's options
A choice question without options accepts any text (or list of text).
"""

import math
from numbers import Number
from typing import Any, Dict, List, Optional, Sequence

from aerojob.core.errors import SurveyValidationError
from aerojob.models.survey import DEFAULT_QUESTION_TYPE, question_index

ID_KEYS = ("questionId", "qid", "question_id")

EXPECTED_VALUES = {
    "short_text": "text or a number",
    "long_text": "text or a number",
    "rating": "a number",
    "multiple_choice": "one of the listed options",
    "checkbox": "a list of the listed options",
}


def _explicit_id(entry: Any) -> Optional[Any]:
    if not isinstance(entry, dict):
        return None
    for key in ID_KEYS:
        if entry.get(key) is not None:
            return entry[key]
    return None


def is_empty_answer(value: Any) -> bool:
    """Absent, an empty list, or blank once converted to text."""
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return str(value).strip() == ""


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _is_numeric_text(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return math.isfinite(float(value.strip()))
    except ValueError:
        return False


def is_valid_value(question: dict, value: Any) -> bool:
    """Whether a non-empty value fits the question's declared type."""
    qtype = question.get("type", DEFAULT_QUESTION_TYPE)
    options = question.get("options") or []

    if qtype == "rating":
        return _is_number(value) or _is_numeric_text(value)
    if qtype == "multiple_choice":
        return isinstance(value, str) and (not options or value in options)
    if qtype == "checkbox":
        if not isinstance(value, (list, tuple)):
            return False
        if not all(isinstance(item, str) for item in value):
            return False
        return not options or all(item in options for item in value)
    return isinstance(value, str) or _is_number(value)


def resolve_answers(survey: dict, raw_answers: Optional[Sequence[Any]]) -> Dict[str, Any]:
    """Map question id -> value for every entry that resolves to a question."""
    order, by_id = question_index(survey)
    resolved = {}

    for idx, entry in enumerate(raw_answers or []):
        explicit = _explicit_id(entry)
        if explicit is not None:
            qid, value = str(explicit), entry.get("value")
        else:
            qid = order[idx] if idx < len(order) else None
            value = entry.get("value") if isinstance(entry, dict) else entry

        if qid not in by_id:
            continue
        resolved[qid] = value

    return resolved


def validate_answers(survey: dict, raw_answers: Optional[Sequence[Any]]) -> List[dict]:
    """
    Normalize answers against a survey's question bank.

    Args:
        survey: Serialized survey (string question ids)
        raw_answers: Answer entries as sent by the client

    Returns:
        [{"question_id": str, "value": ...}] in question order

    Raises:
        SurveyValidationError: the first required question left empty, or a
            value that does not fit its question's type
    """
    if raw_answers is not None and not isinstance(raw_answers, (list, tuple)):
        raise SurveyValidationError("Answers must be a list.")

    order, by_id = question_index(survey)
    resolved = resolve_answers(survey, raw_answers)

    for qid in order:
        question = by_id[qid]
        if question.get("required") and is_empty_answer(resolved.get(qid)):
            raise SurveyValidationError(
                f'Question "{question["text"]}" is required.',
                question_text=question["text"],
            )

    for qid in order:
        question = by_id[qid]
        value = resolved.get(qid)
        if qid not in resolved or is_empty_answer(value):
            continue
        if not is_valid_value(question, value):
            expected = EXPECTED_VALUES.get(question["type"], EXPECTED_VALUES[DEFAULT_QUESTION_TYPE])
            raise SurveyValidationError(
                f'Question "{question["text"]}" has an invalid answer: expected {expected}.',
                question_text=question["text"],
            )

    return [{"question_id": qid, "value": resolved[qid]} for qid in order if qid in resolved]
