"""
Survey / Question model.

Surveys are stored in MongoDB with their questions embedded:

{
    "_id": ObjectId,
    "title": "Exit Survey",
    "description": "",
    "audience": "students",          # all | students | alumni
    "status": "active",              # draft | active | archived
    "questions": [
        {"_id": ObjectId, "text": "...", "type": "rating", "required": True, "options": []}
    ],
    "created_by": 1,
    "created_at": datetime,
    "updated_at": datetime
}

Client input is loose (mixed case, legacy names, missing fields). Everything
that folds enum-like input lives in the lookup tables below.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple
from bson import ObjectId

from aerojob.core.errors import InvalidReferenceError, SurveyValidationError


# ============================================================
# ENUM VALUES
# ============================================================

QUESTION_TYPES = ("short_text", "long_text", "multiple_choice", "checkbox", "rating")
CHOICE_TYPES = ("multiple_choice", "checkbox")
DEFAULT_QUESTION_TYPE = "short_text"

SURVEY_STATUSES = ("draft", "active", "archived")
SURVEY_AUDIENCES = ("all", "students", "alumni")


# ============================================================
# SYNONYM TABLES
# Keys are case-folded, with "-" / "_" turned into single spaces.
# ============================================================

TYPE_SYNONYMS = {
    "short text": "short_text",
    "shorttext": "short_text",
    "text": "short_text",
    "input": "short_text",
    "single line": "short_text",
    "long text": "long_text",
    "longtext": "long_text",
    "textarea": "long_text",
    "paragraph": "long_text",
    "multiple choice": "multiple_choice",
    "radio": "multiple_choice",
    "single select": "multiple_choice",
    "single": "multiple_choice",
    "checkbox": "checkbox",
    "checkboxes": "checkbox",
    "multi select": "checkbox",
    "multiple": "checkbox",
    "multi": "checkbox",
    "rating": "rating",
    "stars": "rating",
    "scale": "rating",
}

STATUS_SYNONYMS = {
    "draft": "draft",
    "active": "active",
    "archived": "archived",
    "archive": "archived",
}

AUDIENCE_SYNONYMS = {
    "all": "all",
    "students": "students",
    "student": "students",
    "alumni": "alumni",
    "alumnus": "alumni",
    "alumnae": "alumni",
    "alumna": "alumni",
}

# Stored audience values a role's bucket matches. Includes the raw synonyms
# so documents written before normalization still resolve.
ROLE_AUDIENCES = {
    "students": ("student", "students"),
    "alumni": ("alumni", "alumnus", "alumnae", "alumna"),
}


def _fold(value: Any) -> str:
    """Case-fold and collapse separators: ' Multi-Select ' -> 'multi select'."""
    s = clean_text(value).lower().replace("-", " ").replace("_", " ")
    return " ".join(s.split())


def clean_text(value: Any, default: str = "") -> str:
    """Stringify and trim; None becomes the default."""
    if value is None:
        value = default
    return str(value).strip()


def normalize_type(raw: Any) -> str:
    """Map a loose question type to a canonical one. Unknown -> short_text."""
    return TYPE_SYNONYMS.get(_fold(raw), DEFAULT_QUESTION_TYPE)


def normalize_status(raw: Any, default: str = "draft") -> str:
    folded = _fold(raw)
    if not folded:
        return default
    if folded not in STATUS_SYNONYMS:
        raise SurveyValidationError(
            f"Invalid survey status '{clean_text(raw)}'. Allowed: {', '.join(SURVEY_STATUSES)}"
        )
    return STATUS_SYNONYMS[folded]


def normalize_audience(raw: Any, default: str = "all") -> str:
    folded = _fold(raw)
    if not folded:
        return default
    if folded not in AUDIENCE_SYNONYMS:
        raise SurveyValidationError(
            f"Invalid survey audience '{clean_text(raw)}'. Allowed: {', '.join(SURVEY_AUDIENCES)}"
        )
    return AUDIENCE_SYNONYMS[folded]


def audiences_for_role(role: Optional[str]) -> List[str]:
    """Stored audience values visible to a role, always including 'all'."""
    bucket = AUDIENCE_SYNONYMS.get(_fold(role))
    return ["all"] + list(ROLE_AUDIENCES.get(bucket, ()))


def normalize_options(raw_options: Optional[Iterable[Any]]) -> List[str]:
    """Trim, drop blanks and duplicates, keep order."""
    options = []
    for option in raw_options or []:
        text = clean_text(option)
        if text and text not in options:
            options.append(text)
    return options


def normalize_question(raw: Dict[str, Any], index: int, known_ids: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Build a stored question from client input.

    Args:
        raw: Question payload ({"id"/"_id", "text", "type", "required", "options"})
        index: Position in the question bank (used for the default text)
        known_ids: Question ids that already belong to this survey.
            A supplied id is kept only if it is one of these.

    Raises:
        SurveyValidationError: question text is blank
    """
    raw = raw or {}
    text = clean_text(raw.get("text"), default=f"Q{index + 1}")
    if not text:
        raise SurveyValidationError(f"Question {index + 1} text is required.")

    qtype = normalize_type(raw.get("type"))
    options = normalize_options(raw.get("options")) if qtype in CHOICE_TYPES else []

    supplied_id = raw.get("id") or raw.get("_id")
    if supplied_id is not None and str(supplied_id) in set(known_ids):
        qid = ObjectId(str(supplied_id))
    else:
        qid = ObjectId()

    return {
        "_id": qid,
        "text": text,
        "type": qtype,
        "required": bool(raw.get("required")),
        "options": options,
    }


def normalize_survey_payload(payload: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Normalize a create/update payload into the stored survey shape
    (without _id and timestamps).

    On update, pass the stored survey as `existing` so question ids that
    the client echoes back survive the edit.
    """
    title = clean_text(payload.get("title"))
    if not title:
        raise SurveyValidationError("Survey title is required.")

    known_ids = set()
    if existing:
        known_ids = {str(q["_id"]) for q in existing.get("questions", []) if q.get("_id") is not None}

    questions = []
    for i, raw_question in enumerate(payload.get("questions") or []):
        question = normalize_question(raw_question, i, known_ids)
        # an id may only be claimed once per survey
        known_ids.discard(str(question["_id"]))
        questions.append(question)

    return {
        "title": title,
        "description": clean_text(payload.get("description")),
        "audience": normalize_audience(payload.get("audience")),
        "status": normalize_status(payload.get("status")),
        "questions": questions,
    }


def serialize_question(question: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(question["_id"]),
        "text": question.get("text", ""),
        "type": question.get("type", DEFAULT_QUESTION_TYPE),
        "required": bool(question.get("required")),
        "options": list(question.get("options") or []),
    }


def serialize_survey(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert a stored survey to a JSON-friendly dict (string ids)."""
    if doc is None:
        return None
    return {
        "id": str(doc["_id"]),
        "title": doc.get("title", ""),
        "description": doc.get("description", ""),
        "audience": doc.get("audience", "all"),
        "status": doc.get("status", "draft"),
        "questions": [serialize_question(q) for q in doc.get("questions", [])],
        "created_by": doc.get("created_by"),
        "created_at": doc.get("created_at"),
        "updated_at": doc.get("updated_at"),
    }


def parse_object_id(value: Any, label: str = "id") -> ObjectId:
    """
    Parse an ObjectId from a path/query value.

    Raises:
        InvalidReferenceError: value is not a 24-hex-char id
    """
    if isinstance(value, ObjectId):
        return value
    if value is None or not ObjectId.is_valid(str(value)):
        raise InvalidReferenceError(f"Invalid {label}")
    return ObjectId(str(value))


def question_index(survey: Dict[str, Any]) -> Tuple[List[str], Dict[str, Dict[str, Any]]]:
    """Ordered question ids and an id -> question map for a serialized survey."""
    order = [q["id"] for q in survey.get("questions", [])]
    by_id = {q["id"]: q for q in survey.get("questions", [])}
    return order, by_id
