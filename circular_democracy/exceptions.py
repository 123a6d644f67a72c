"""Error types raised by the ingestion pipeline and its collaborators."""


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class DatastoreError(PipelineError):
    """A Supabase/PostgREST call failed (transport, HTTP or query error)."""


class EmbeddingError(PipelineError):
    """The embedding service could not produce a vector for a message."""


class ClassificationUnavailableError(PipelineError):
    """The fallback campaign could not be read or created."""


class PersistenceError(PipelineError):
    """A classified message could not be stored."""
