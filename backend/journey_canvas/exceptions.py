"""
Journey Canvas Exceptions.

Custom exceptions for graph editing, persistence and suggestion merging.
"""


class CanvasError(Exception):
    """Base class for all canvas engine errors."""
    pass


class MalformedDocument(CanvasError):
    """Raised when a persisted document fails to parse or fails shape validation."""
    pass


class DocumentNotFound(CanvasError):
    """Raised when the persistence service has no document for an id."""
    pass


class NodeNotFound(CanvasError):
    """Raised when operating on a node id that isn't in the graph."""
    pass


class InvalidEdgeEndpoint(CanvasError):
    """Raised when an edge references a missing node or an invalid handle."""
    pass


class PersistenceCommitFailed(CanvasError):
    """Raised when writing a document to the persistence service fails."""
    pass


class SuggestionMergeRejected(CanvasError):
    """Raised when a suggestion payload is empty or malformed."""
    pass


class MeasurementError(CanvasError):
    """Raised by a measurement adapter that cannot lay out the given text."""
    pass
