import hashlib

import pytest

from notebook_rag.domain.errors import ValidationError
from notebook_rag.domain.models import SourceKind
from notebook_rag.domain.services.vector_identity import derive_vector_id, plan_batches


def test_id_is_sha1_of_kind_source_index():
    expected = hashlib.sha1(b"pdf:a.pdf:0").hexdigest()
    assert derive_vector_id(SourceKind.PDF, "a.pdf", 0) == expected
    assert derive_vector_id("pdf", "a.pdf", 0) == expected
    assert len(expected) == 40


def test_ids_differ_by_any_component():
    base = derive_vector_id(SourceKind.TEXT, "raw", 0)
    assert base != derive_vector_id(SourceKind.TEXT, "raw", 1)
    assert base != derive_vector_id(SourceKind.PDF, "raw", 0)
    assert base != derive_vector_id(SourceKind.TEXT, "other", 0)


def test_plan_batches_splits_in_order():
    items = list(range(450))
    batches = plan_batches(items, batch_size=200)
    assert [len(b) for b in batches] == [200, 200, 50]
    assert [x for b in batches for x in b] == items


def test_plan_batches_exact_multiple():
    assert [len(b) for b in plan_batches(list(range(400)))] == [200, 200]


def test_plan_batches_empty_input():
    assert plan_batches([], batch_size=10) == []


@pytest.mark.parametrize("batch_size", [0, -3])
def test_plan_batches_rejects_non_positive_size(batch_size):
    with pytest.raises(ValidationError):
        plan_batches([1, 2, 3], batch_size=batch_size)
