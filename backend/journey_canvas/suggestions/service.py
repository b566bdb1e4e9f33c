"""
Interface to the external suggestion service.

The engine never talks to a model directly; callers fetch a payload through
a SuggestionService and hand it to the merge functions.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class SuggestionService(ABC):
    """Produces suggestion payloads from natural-language prompts."""

    @abstractmethod
    async def request_suggestion(self, prompt: str, context: Optional[dict] = None) -> Any:
        """
        Ask for a suggestion.

        Returns:
            A raw payload: a step list for graph suggestions or a field
            mapping for record suggestions

        Raises:
            SuggestionMergeRejected: the service produced nothing usable
        """
        ...
