"""
Flat field-set suggestions for use-case records.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from journey_canvas.exceptions import SuggestionMergeRejected


USE_CASE_FIELDS = (
    "problemStatement",
    "proposedSolution",
    "keyObjectives",
    "requiredDataInputs",
    "expectedOutputs",
    "keyStakeholders",
    "scope",
    "potentialRisks",
    "estimatedImpact",
)


@dataclass
class FieldMergeResult:
    fields: dict[str, Any]
    changed: list[str] = field(default_factory=list)


def _field_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "\n".join(_field_text(item) for item in value if _field_text(item))
    return str(value).strip()


def merge_field_suggestion(
    current: Mapping[str, Any],
    suggestion: Any,
    allowed: Iterable[str] = USE_CASE_FIELDS,
) -> FieldMergeResult:
    """
    Overwrite record fields with the non-empty suggested values.

    Fields outside ``allowed`` and blank suggestions are ignored; every other
    field of ``current`` is kept.

    Raises:
        SuggestionMergeRejected: the suggestion isn't a mapping or suggests nothing usable
    """
    if isinstance(suggestion, (str, bytes)):
        try:
            suggestion = json.loads(suggestion)
        except ValueError as e:
            raise SuggestionMergeRejected(f"Field suggestion is not valid JSON: {e}") from e
    if not isinstance(suggestion, Mapping):
        raise SuggestionMergeRejected("Field suggestion must be an object")

    updates = {}
    for name in allowed:
        text = _field_text(suggestion.get(name))
        if text:
            updates[name] = text
    if not updates:
        raise SuggestionMergeRejected("Field suggestion contains no usable fields")

    merged = dict(current)
    changed = [name for name, value in updates.items() if merged.get(name) != value]
    merged.update(updates)
    return FieldMergeResult(fields=merged, changed=changed)
