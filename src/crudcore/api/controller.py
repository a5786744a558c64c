"""Generic CRUD controller for one mapped model."""

from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..managers.model_manager import ModelManager
from ..managers.response_manager import ResponseManager

RULES_SET_STORE = "store"
RULES_SET_UPDATE = "update"


def crud_router(
    model: type,
    get_session: Callable[..., Any],
    settings: Optional[Mapping[str, Any]] = None,
) -> APIRouter:
    """
    Build index/show/store/update/destroy routes for ``model``.

    Args:
        model: Mapped model class served by the routes
        get_session: FastAPI dependency yielding a request-scoped session
        settings: Manager defaults (primary key, page limit, rules set)

    Returns:
        APIRouter to mount under the resource prefix
    """
    router = APIRouter()

    def managers(session: Session) -> Tuple[ModelManager, ResponseManager]:
        # Fresh instances per request: managers hold mutable per-request state
        model_manager = ModelManager(model, session, settings)
        response_manager = ResponseManager().set_model_manager(model_manager)
        return model_manager, response_manager

    def handle_includes_and_excludes(
        response_manager: ResponseManager,
        includes: Optional[str],
        excludes: Optional[str],
    ) -> None:
        if includes is not None:
            response_manager.parse_includes(includes)
        if excludes is not None:
            response_manager.parse_excludes(excludes)

    @router.get("")
    def index(
        limit: Optional[int] = Query(default=None, ge=1),
        page: int = Query(default=1, ge=1),
        includes: Optional[str] = Query(default=None),
        excludes: Optional[str] = Query(default=None),
        session: Session = Depends(get_session),
    ) -> JSONResponse:
        model_manager, response_manager = managers(session)
        result = model_manager.paginate(limit, page)
        handle_includes_and_excludes(response_manager, includes, excludes)
        return response_manager.paginate(result)

    @router.get("/{primary_key}")
    def show(
        primary_key: str,
        includes: Optional[str] = Query(default=None),
        excludes: Optional[str] = Query(default=None),
        session: Session = Depends(get_session),
    ) -> JSONResponse:
        model_manager, response_manager = managers(session)
        result = model_manager.show(primary_key)
        handle_includes_and_excludes(response_manager, includes, excludes)
        return response_manager.item(result)

    @router.post("")
    def store(
        inputs: Optional[Dict[str, Any]] = Body(default=None),
        session: Session = Depends(get_session),
    ) -> JSONResponse:
        model_manager, response_manager = managers(session)
        inputs = inputs or {}
        model_manager.validate(inputs, RULES_SET_STORE)
        return response_manager.item(model_manager.store(inputs))

    @router.api_route("/{primary_key}", methods=["PUT", "PATCH"])
    def update(
        primary_key: str,
        inputs: Optional[Dict[str, Any]] = Body(default=None),
        session: Session = Depends(get_session),
    ) -> JSONResponse:
        model_manager, response_manager = managers(session)
        inputs = inputs or {}
        model_manager.validate(inputs, RULES_SET_UPDATE)
        return response_manager.item(model_manager.update(primary_key, inputs))

    @router.delete("/{primary_key}")
    def destroy(
        primary_key: str,
        session: Session = Depends(get_session),
    ) -> JSONResponse:
        model_manager, response_manager = managers(session)
        return response_manager.item(model_manager.delete(primary_key))

    return router
