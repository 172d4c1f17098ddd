"""Answer resolution, required-question and per-type value checks."""

import pytest

from aerojob.core.errors import SurveyValidationError
from aerojob.models.survey import normalize_survey_payload, serialize_survey
from aerojob.services.response_validator import (
    is_empty_answer,
    resolve_answers,
    validate_answers,
)
from bson import ObjectId


@pytest.fixture
def survey(feedback_survey_payload):
    doc = normalize_survey_payload(feedback_survey_payload)
    doc["_id"] = ObjectId()
    return serialize_survey(doc)


@pytest.fixture
def qids(survey):
    return [q["id"] for q in survey["questions"]]


def test_explicit_answers(survey, qids):
    answers = validate_answers(survey, [
        {"questionId": qids[0], "value": "Engineer"},
        {"qid": qids[1], "value": ["Job fair"]},
        {"question_id": qids[2], "value": 4},
    ])

    assert answers == [
        {"question_id": qids[0], "value": "Engineer"},
        {"question_id": qids[1], "value": ["Job fair"]},
        {"question_id": qids[2], "value": 4},
    ]


def test_positional_answers(survey, qids):
    answers = validate_answers(survey, ["Engineer", ["Mock interview"], 5, "Thanks"])

    assert [a["question_id"] for a in answers] == qids
    assert answers[3]["value"] == "Thanks"


def test_positional_value_objects(survey, qids):
    answers = validate_answers(survey, [{"value": "Engineer"}, {"value": ["Job fair"]}])
    assert answers == [
        {"question_id": qids[0], "value": "Engineer"},
        {"question_id": qids[1], "value": ["Job fair"]},
    ]


def test_answers_returned_in_question_order(survey, qids):
    answers = validate_answers(survey, [
        {"questionId": qids[2], "value": 3},
        {"questionId": qids[1], "value": ["Job fair"]},
        {"questionId": qids[0], "value": "Engineer"},
    ])
    assert [a["question_id"] for a in answers] == qids[:3]


def test_unknown_question_ids_are_dropped(survey, qids):
    answers = validate_answers(survey, [
        {"questionId": qids[0], "value": "Engineer"},
        {"questionId": qids[1], "value": ["Job fair"]},
        {"questionId": str(ObjectId()), "value": "stray"},
        {"questionId": "not-an-id", "value": "stray"},
        "positional entry beyond the last question",
    ])
    assert [a["question_id"] for a in answers] == qids[:2]


def test_last_value_wins(survey, qids):
    resolved = resolve_answers(survey, [
        {"questionId": qids[0], "value": "first"},
        {"questionId": qids[0], "value": "second"},
    ])
    assert resolved[qids[0]] == "second"


@pytest.mark.parametrize("empty", [None, "", "   ", []])
def test_required_question_rejects_empty(survey, qids, empty):
    with pytest.raises(SurveyValidationError) as exc:
        validate_answers(survey, [
            {"questionId": qids[0], "value": "Engineer"},
            {"questionId": qids[1], "value": empty},
        ])
    assert exc.value.question_text == "Which services did you use?"
    assert exc.value.message == 'Question "Which services did you use?" is required.'


def test_missing_answers_fail_on_first_required_question(survey):
    with pytest.raises(SurveyValidationError) as exc:
        validate_answers(survey, [])
    assert exc.value.question_text == "Your current position"

    with pytest.raises(SurveyValidationError):
        validate_answers(survey, None)


def test_zero_counts_as_an_answer():
    survey = serialize_survey({
        "_id": ObjectId(),
        **normalize_survey_payload({
            "title": "Rate us",
            "questions": [{"text": "Score", "type": "rating", "required": True}],
        }),
    })
    answers = validate_answers(survey, [0])
    assert answers[0]["value"] == 0


def test_optional_questions_may_be_skipped(survey, qids):
    answers = validate_answers(survey, ["Engineer", ["Job fair"]])
    assert len(answers) == 2


@pytest.mark.parametrize("bad", [{"nested": "object"}, True, ["ok", 3], [["a"]]])
def test_rejects_unsupported_value_shapes(survey, qids, bad):
    with pytest.raises(SurveyValidationError):
        validate_answers(survey, [
            {"questionId": qids[0], "value": "Engineer"},
            {"questionId": qids[1], "value": ["Job fair"]},
            {"questionId": qids[2], "value": bad},
        ])


def test_answers_must_be_a_list(survey):
    with pytest.raises(SurveyValidationError):
        validate_answers(survey, {"answers": "nope"})


def test_is_empty_answer():
    assert is_empty_answer(None)
    assert is_empty_answer("  ")
    assert is_empty_answer([])
    assert not is_empty_answer(0)
    assert not is_empty_answer(["a"])
    assert not is_empty_answer("no")


@pytest.fixture
def typed_survey():
    doc = normalize_survey_payload({
        "title": "Typed",
        "questions": [
            {"text": "Rate the program", "type": "rating"},
            {"text": "Would you recommend us?", "type": "multiple_choice", "options": ["Yes", "No"]},
            {"text": "Which tracks?", "type": "checkbox", "options": ["X", "Y"]},
            {"text": "Job title", "type": "short_text"},
            {"text": "Comments", "type": "long_text"},
        ],
    })
    doc["_id"] = ObjectId()
    return serialize_survey(doc)


def answer_at(survey, index, value):
    return validate_answers(survey, [{"questionId": survey["questions"][index]["id"], "value": value}])


@pytest.mark.parametrize("index,value", [
    (0, 4),
    (0, 3.5),
    (0, "4"),
    (0, " 2.5 "),
    (1, "Yes"),
    (2, ["X"]),
    (2, ["X", "Y"]),
    (3, "Engineer"),
    (3, 2024),
    (4, "Loved it"),
])
def test_value_matching_question_type_is_kept_as_given(typed_survey, index, value):
    answers = answer_at(typed_survey, index, value)
    assert answers == [{"question_id": typed_survey["questions"][index]["id"], "value": value}]


@pytest.mark.parametrize("index,value", [
    (0, ["not", "a", "rating"]),
    (0, "five"),
    (0, "nan"),
    (0, True),
    (1, 42),
    (1, "Maybe"),
    (1, ["Yes"]),
    (2, "Z"),
    (2, "X"),
    (2, ["X", "Z"]),
    (2, ["X", 1]),
    (3, ["a", "b"]),
    (3, {"text": "Engineer"}),
    (4, False),
])
def test_value_not_matching_question_type_is_rejected(typed_survey, index, value):
    question = typed_survey["questions"][index]

    with pytest.raises(SurveyValidationError) as exc:
        answer_at(typed_survey, index, value)

    assert exc.value.question_text == question["text"]
    assert exc.value.message.startswith(f'Question "{question["text"]}" has an invalid answer')


def test_mixed_payload_fails_on_first_mistyped_question(typed_survey):
    with pytest.raises(SurveyValidationError) as exc:
        validate_answers(typed_survey, [["not", "a", "rating"], 42, "Z"])
    assert exc.value.question_text == "Rate the program"


def test_choice_question_without_options_accepts_any_text():
    survey = serialize_survey({
        "_id": ObjectId(),
        **normalize_survey_payload({
            "title": "Open choice",
            "questions": [
                {"text": "Pick one", "type": "radio"},
                {"text": "Pick many", "type": "checkbox"},
            ],
        }),
    })
    answers = validate_answers(survey, ["anything", ["a", "b"]])
    assert [a["value"] for a in answers] == ["anything", ["a", "b"]]

    with pytest.raises(SurveyValidationError):
        validate_answers(survey, [7])
