"""Route Dependencies - resolve the engine registry and the engine for {model}.

Invariants:
    - The registry is read from app.state (set once in the lifespan)
    - Unknown model names raise ModelNotFoundError (404) listing available models
"""

from fastapi import Depends, Request

from app.core.errors import ErrorContext, ModelNotFoundError
from app.services.crud_engine import CrudEngine
from app.services.engine_registry import EngineRegistry


def get_registry(request: Request) -> EngineRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        raise RuntimeError("Engine registry not initialized")
    return registry


def get_engine(
    model: str, registry: EngineRegistry = Depends(get_registry),
) -> CrudEngine:
    engine = registry.get(model)
    if engine is None:
        raise ModelNotFoundError(
            model, registry.names(), ErrorContext(model_name=model),
        )
    return engine
