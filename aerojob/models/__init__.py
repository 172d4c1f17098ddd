"""
Models module - stored document shapes and the rules that build them.

- survey: question / survey normalization, synonym tables, serialization
"""

from aerojob.models.survey import (
    normalize_survey_payload,
    serialize_survey,
    audiences_for_role,
)

__all__ = ["normalize_survey_payload", "serialize_survey", "audiences_for_role"]
