"""
Action persistence and result normalization.
"""

from .action_service import ActionService, to_action_record
from .document_service import DocumentService, ACTION_RESULT_METADATA
from .result_normalizer import (
    TextResult,
    TextContentResult,
    ContentEnvelopeResult,
    RecordResult,
    ScalarResult,
    NormalizedResult,
    parse_result,
    canonical_text,
    serialize,
)

__all__ = [
    "ActionService",
    "to_action_record",
    "DocumentService",
    "ACTION_RESULT_METADATA",
    "TextResult",
    "TextContentResult",
    "ContentEnvelopeResult",
    "RecordResult",
    "ScalarResult",
    "NormalizedResult",
    "parse_result",
    "canonical_text",
    "serialize",
]
