"""Domain errors (typed).

Why: Unified error family for the application layer, without infra leaks.
Interface layers map ValidationError to 400 / exit code 1, everything else to 500.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ValidationError(DomainError):
    """Invalid input/domain state (malformed request, bad parameters)."""


class NoSourcesProvidedError(ValidationError):
    """Ingestion was requested without a single PDF, URL or raw text."""

    def __init__(self, message: str = "no valid sources provided") -> None:
        super().__init__(message)


class EmptyContentError(ValidationError):
    """All sources were extracted but produced no indexable text."""

    def __init__(self, message: str = "no content to index") -> None:
        super().__init__(message)


class IngestionError(DomainError):
    """Ingestion of a source failed; the whole request is aborted."""


class ExtractionError(IngestionError):
    """PDF/audio/text extraction failed."""


# Infrastructure-mapped errors
class EmbeddingError(DomainError):
    """Embedding backend failed or is misconfigured."""


class VectorStoreError(DomainError):
    """Vector store backend failed or is misconfigured."""


class LLMError(DomainError):
    """LLM backend failed or is misconfigured."""


GenerationError = LLMError
StoreError = VectorStoreError
