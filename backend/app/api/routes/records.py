"""Record Routes - generic CRUD endpoints for every registered model.

Invariants:
    - One set of routes serves all models; {model} resolves to a CrudEngine
    - Query strings reach the engine as a plain dict; repeated keys become lists
    - "Not found" from the engine (None/False) becomes ResourceNotFoundError (404)
    - /{model}/count is declared before /{model}/{record_id}

Design Decisions:
    - Routes never build queries: they translate HTTP to engine calls and back
    - Soft delete and hard delete both answer {"deleted": true}
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, status

from app.api.dependencies import get_engine
from app.core.errors import ErrorContext, ResourceNotFoundError
from app.core.paginate import wants_deleted
from app.schemas.record import BulkCreateRequest, RecordCreate, RecordUpdate
from app.services.crud_engine import CrudEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["records"])


def query_params_to_dict(request: Request) -> dict[str, Any]:
    """Flatten the query string; repeated keys collect into a list."""
    params: dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        if key not in params:
            params[key] = value
        elif isinstance(params[key], list):
            params[key].append(value)
        else:
            params[key] = [params[key], value]
    return params


def _not_found(engine: CrudEngine, record_id: str, operation: str) -> ResourceNotFoundError:
    return ResourceNotFoundError(
        engine.model_name, record_id,
        ErrorContext(
            model_name=engine.model_name, operation=operation, record_id=record_id,
        ),
    )


@router.get("/{model}")
async def list_records(request: Request, engine: CrudEngine = Depends(get_engine)):
    """List records with filtering, pagination, sorting and projection."""
    result = await engine.list_records(query_params_to_dict(request))
    return result.to_dict()


@router.get("/{model}/count")
async def count_records(request: Request, engine: CrudEngine = Depends(get_engine)):
    """Count records matching the same filters as the list endpoint."""
    return {"count": await engine.count(query_params_to_dict(request))}


@router.get("/{model}/{record_id}")
async def get_record(
    record_id: str,
    deleted: str | None = Query(None),
    engine: CrudEngine = Depends(get_engine),
):
    """`deleted` follows the list rule: only the literal "true" reveals soft-deleted rows."""
    record = await engine.get_by_id(
        record_id, include_deleted=wants_deleted({"deleted": deleted}),
    )
    if record is None:
        raise _not_found(engine, record_id, "get_by_id")
    return record


@router.post("/{model}", status_code=status.HTTP_201_CREATED)
async def create_record(body: RecordCreate, engine: CrudEngine = Depends(get_engine)):
    return await engine.create(body.model_dump())


@router.post("/{model}/bulk", status_code=status.HTTP_201_CREATED)
async def bulk_create_records(
    body: BulkCreateRequest, engine: CrudEngine = Depends(get_engine),
):
    return await engine.bulk_create([item.model_dump() for item in body.items])


@router.patch("/{model}/{record_id}")
async def update_record(
    record_id: str, body: RecordUpdate, engine: CrudEngine = Depends(get_engine),
):
    record = await engine.update(record_id, body.to_patch())
    if record is None:
        raise _not_found(engine, record_id, "update")
    return record


@router.delete("/{model}/{record_id}")
async def soft_delete_record(record_id: str, engine: CrudEngine = Depends(get_engine)):
    """Mark a live record deleted. Already-deleted records answer 404."""
    if not await engine.soft_delete(record_id):
        raise _not_found(engine, record_id, "soft_delete")
    return {"deleted": True}


@router.delete("/{model}/{record_id}/hard")
async def hard_delete_record(record_id: str, engine: CrudEngine = Depends(get_engine)):
    """Physically remove a record, live or soft-deleted."""
    if not await engine.hard_delete(record_id):
        raise _not_found(engine, record_id, "hard_delete")
    return {"deleted": True}


@router.post("/{model}/{record_id}/restore")
async def restore_record(record_id: str, engine: CrudEngine = Depends(get_engine)):
    record = await engine.restore(record_id)
    if record is None:
        raise _not_found(engine, record_id, "restore")
    return record
