"""Error taxonomy of the suggestion pipeline.

Every error carries a machine-readable ErrorCause. The RetrievalOrchestrator
catches all of them exactly once and turns them into an empty suggestion list;
ValidationError never leaves the SuggestionGenerator.
"""

from enum import Enum


class ErrorCause(str, Enum):
    """Machine-readable reason why a request degraded to zero suggestions."""

    AUTH = "auth"
    AUTHORIZATION = "authorization"
    PROJECT = "project"
    EMBEDDING = "embedding"
    RETRIEVAL = "retrieval"
    GENERATION = "generation"
    VALIDATION = "validation"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


class SuggestionPipelineError(Exception):
    """Base class for all errors raised below the orchestrator boundary."""

    cause: ErrorCause = ErrorCause.INTERNAL


class AuthError(SuggestionPipelineError):
    """Service-account credentials are malformed or the token exchange was rejected."""

    cause = ErrorCause.AUTH


class AuthorizationError(SuggestionPipelineError):
    """The caller has no read access to the requested project (HTTP 403 semantics)."""

    cause = ErrorCause.AUTHORIZATION


class ProjectLookupError(SuggestionPipelineError):
    """The project or file metadata store could not be queried."""

    cause = ErrorCause.PROJECT


class EmbeddingError(SuggestionPipelineError):
    cause = ErrorCause.EMBEDDING


class EmbeddingDimensionError(EmbeddingError):
    """A vector does not have the configured dimensionality. Configuration error, never retried."""


class RetrievalError(SuggestionPipelineError):
    cause = ErrorCause.RETRIEVAL


class GenerationError(SuggestionPipelineError):
    cause = ErrorCause.GENERATION


class ValidationError(SuggestionPipelineError):
    """The model answered, but not with parseable suggestions."""

    cause = ErrorCause.VALIDATION
