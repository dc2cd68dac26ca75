"""Engine Registry - model name -> CrudEngine bound to that model's table.

Invariants:
    - One registry per process, built in the FastAPI lifespan and stored on app.state
    - Populated once at startup, read-only afterwards (no locking needed for readers)
    - A model name is registered at most once
    - names() preserves registration order

Design Decisions:
    - Explicitly constructed and injected instead of a class-level singleton
"""

import logging
from typing import Callable, Iterable

from app.core.errors import TableRegistrationError
from app.core.query_types import TableDescriptor
from app.core.repository_protocols import StorageAdapter
from app.infrastructure.table_schema import describe_table
from app.services.crud_engine import CrudEngine, generate_record_id

logger = logging.getLogger(__name__)


class EngineRegistry:
    """Process-wide lookup of CRUD engines by model name."""

    def __init__(
        self,
        storage: StorageAdapter,
        id_factory: Callable[[], str] = generate_record_id,
        default_timeout: float | None = None,
    ):
        self._storage = storage
        self._id_factory = id_factory
        self._default_timeout = default_timeout
        self._engines: dict[str, CrudEngine] = {}

    def register(self, model_name: str, table: TableDescriptor) -> CrudEngine:
        if model_name in self._engines:
            raise TableRegistrationError(table.name, f"model '{model_name}' already registered")
        engine = CrudEngine(
            table, model_name, self._storage,
            id_factory=self._id_factory,
            default_timeout=self._default_timeout,
        )
        self._engines[model_name] = engine
        logger.info(f"Registered model {model_name} (table {table.name})")
        return engine

    def register_model(self, orm_model: type, model_name: str | None = None) -> CrudEngine:
        """Register a declarative model by describing its __table__."""
        table = describe_table(orm_model.__table__)
        return self.register(model_name or table.name, table)

    def get(self, model_name: str) -> CrudEngine | None:
        return self._engines.get(model_name)

    def names(self) -> list[str]:
        return list(self._engines)

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._engines


def build_registry(
    storage: StorageAdapter,
    models: Iterable[type],
    default_timeout: float | None = None,
) -> EngineRegistry:
    """Create the registry and register every model once (startup only)."""
    registry = EngineRegistry(storage, default_timeout=default_timeout)
    for model in models:
        registry.register_model(model)
    return registry
