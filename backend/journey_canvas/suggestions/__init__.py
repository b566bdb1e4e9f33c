"""
Suggestions module - merging externally generated content into documents.
"""

from .payload import SuggestionEntry, parse_suggestion_payload
from .merge import merge_suggestion, synthesize_edges, default_layout_position
from .fields import merge_field_suggestion, FieldMergeResult, USE_CASE_FIELDS
from .service import SuggestionService

__all__ = [
    "SuggestionEntry",
    "parse_suggestion_payload",
    "merge_suggestion",
    "synthesize_edges",
    "default_layout_position",
    "merge_field_suggestion",
    "FieldMergeResult",
    "USE_CASE_FIELDS",
    "SuggestionService",
]
