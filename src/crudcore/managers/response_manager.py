"""Response manager: turns a model manager's result into a JSON response."""

from typing import Any, Dict, Iterable, Mapping, Optional, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..database.repository import Page
from ..errors import ManagerConfigError, StructuredError
from ..transformers.serializer import Collection, Item, JsonApiSerializer
from .model_manager import ModelManager

HTTP_OK = 200
HTTP_BAD_REQUEST = 400

_UNSET = object()


class ResponseManager:
    INCLUDES_ATTRIBUTE = "includes"
    EXCLUDES_ATTRIBUTE = "excludes"

    def __init__(self, serializer: Optional[JsonApiSerializer] = None):
        self.serializer = serializer or JsonApiSerializer()
        self.model_manager: Optional[ModelManager] = None

    def set_model_manager(self, model_manager: ModelManager) -> "ResponseManager":
        self.model_manager = model_manager
        return self

    def parse_includes(self, includes: str) -> None:
        """Relations to expand, comma separated."""
        self.serializer.parse_includes(includes)

    def parse_excludes(self, excludes: str) -> None:
        """Relations to leave out, comma separated (wins over includes)."""
        self.serializer.parse_excludes(excludes)

    def _manager(self) -> ModelManager:
        if self.model_manager is None:
            raise ManagerConfigError("ResponseManager has no model manager set.")
        return self.model_manager

    def _result(self, result: Any) -> Any:
        return self._manager().get_current() if result is _UNSET else result

    def item(self, result: Any = _UNSET, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
        """Response for one model (the manager's current result by default)."""
        manager = self._manager()
        resource = Item(
            self._result(result),
            manager.get_transformer(),
            manager.get_model_key(),
        )
        return self.resource_response(resource, headers)

    def collection(self, result: Any = _UNSET, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
        manager = self._manager()
        records = self._result(result)
        if isinstance(records, Page):
            records = records.items
        resource = Collection(
            records or [],
            manager.get_transformer(),
            manager.get_model_key(),
        )
        return self.resource_response(resource, headers)

    def paginate(self, result: Any = _UNSET, headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
        """
        Response for a page of models, with pagination metadata.

        Raises:
            ManagerConfigError: If the result is not a Page
        """
        manager = self._manager()
        page = self._result(result)
        if not isinstance(page, Page):
            raise ManagerConfigError(
                f"Paginated response needs a Page, {type(page).__name__} given."
            )
        resource = Collection(
            page.items,
            manager.get_transformer(),
            manager.get_model_key(),
            paginator=page,
        )
        return self.resource_response(resource, headers)

    def resource_response(self, resource: Union[Item, Collection], headers: Optional[Mapping[str, str]] = None) -> JSONResponse:
        data = self.serializer.create_data(resource)
        return self.response(data, HTTP_OK, headers)

    def response(
        self,
        data: Optional[Dict[str, Any]] = None,
        status: int = HTTP_OK,
        headers: Optional[Mapping[str, str]] = None,
    ) -> JSONResponse:
        return JSONResponse(content=jsonable_encoder(data), status_code=status, headers=dict(headers or {}))

    def errors(
        self,
        errors: Iterable[Union[StructuredError, Mapping[str, Any]]],
        status: int = HTTP_BAD_REQUEST,
        headers: Optional[Mapping[str, str]] = None,
    ) -> JSONResponse:
        """Error envelope ``{"errors": [...]}``; no data section."""
        rendered = [error.to_dict() if isinstance(error, StructuredError) else dict(error) for error in errors]
        return self.response({"errors": rendered}, status, headers)
