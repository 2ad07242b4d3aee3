from notebook_rag.domain.errors import (
    DomainError,
    EmbeddingError,
    EmptyContentError,
    ExtractionError,
    GenerationError,
    IngestionError,
    LLMError,
    NoSourcesProvidedError,
    StoreError,
    ValidationError,
    VectorStoreError,
)


def test_error_hierarchy():
    assert issubclass(NoSourcesProvidedError, ValidationError)
    assert issubclass(EmptyContentError, ValidationError)
    assert issubclass(ExtractionError, IngestionError)
    for cls in (ValidationError, IngestionError, EmbeddingError, VectorStoreError, LLMError):
        assert issubclass(cls, DomainError)


def test_aliases():
    assert GenerationError is LLMError
    assert StoreError is VectorStoreError


def test_default_messages():
    assert str(NoSourcesProvidedError()) == "no valid sources provided"
    assert str(EmptyContentError()) == "no content to index"
