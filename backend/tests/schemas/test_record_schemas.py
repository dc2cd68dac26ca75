"""Record Schema tests - create/update/bulk request bodies."""

import pytest
from pydantic import ValidationError

from app.schemas.record import BulkCreateRequest, RecordCreate, RecordUpdate


def test_create_strips_name_and_keeps_extra_columns():
    body = RecordCreate(name="  Ann ", age=31)
    assert body.model_dump() == {"name": "Ann", "data": {}, "age": 31}


@pytest.mark.parametrize("name", ["", "   ", "x" * 256])
def test_create_rejects_bad_names(name):
    with pytest.raises(ValidationError):
        RecordCreate(name=name)


def test_create_requires_object_data():
    with pytest.raises(ValidationError):
        RecordCreate(name="a", data=[1, 2])


def test_update_patch_contains_only_sent_fields():
    assert RecordUpdate(email="a@x.io").to_patch() == {"email": "a@x.io"}
    assert RecordUpdate().to_patch() == {}


@pytest.mark.parametrize("field", ["name", "data"])
def test_update_rejects_explicit_null(field):
    with pytest.raises(ValidationError):
        RecordUpdate(**{field: None})


def test_bulk_bounds():
    with pytest.raises(ValidationError):
        BulkCreateRequest(items=[])
    with pytest.raises(ValidationError):
        BulkCreateRequest(items=[{"name": "a"}] * 1001)
    assert len(BulkCreateRequest(items=[{"name": "a"}]).items) == 1
