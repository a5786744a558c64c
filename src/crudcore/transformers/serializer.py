"""JSON:API serialization of transformed resources.

``Item`` and ``Collection`` pair data with the transformer and resource key used
to render it. ``JsonApiSerializer`` holds the includes/excludes requested for one
request and turns a resource into a ``{"data": ...}`` document.

The resource ``id`` is the model's mapper primary key, whatever attribute the
routes use to look records up.
"""

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Set, Tuple, Union

from sqlalchemy import inspect

if TYPE_CHECKING:
    from ..database.repository import Page
    from .base import BaseTransformer


class Item:
    """A single model rendered as one resource object."""

    def __init__(self, data: Any, transformer: "BaseTransformer", resource_key: str):
        self.data = data
        self.transformer = transformer
        self.resource_key = resource_key


class Collection:
    """A list of models rendered as an array of resource objects."""

    def __init__(
        self,
        data: Iterable[Any],
        transformer: "BaseTransformer",
        resource_key: str,
        paginator: Optional["Page"] = None,
    ):
        self.data = list(data)
        self.transformer = transformer
        self.resource_key = resource_key
        self.paginator = paginator

    def set_paginator(self, paginator: "Page") -> "Collection":
        self.paginator = paginator
        return self

Resource = Union[Item, Collection]


def _parse_names(names: Union[str, Iterable[str], None]) -> List[str]:
    if names is None:
        return []
    if isinstance(names, str):
        names = names.split(",")
    return [name.strip() for name in names if name and name.strip()]


class JsonApiSerializer:
    """Render resources as JSON:API documents."""

    def __init__(self, recursion_limit: int = 10):
        self.recursion_limit = recursion_limit
        self.requested_includes: Set[str] = set()
        self.requested_excludes: Set[str] = set()

    def parse_includes(self, includes: Union[str, Iterable[str], None]) -> "JsonApiSerializer":
        """Request includes; ``posts.user`` also requests ``posts``."""
        for name in _parse_names(includes):
            parts = name.split(".")[: self.recursion_limit]
            for depth in range(1, len(parts) + 1):
                self.requested_includes.add(".".join(parts[:depth]))
        return self

    def parse_excludes(self, excludes: Union[str, Iterable[str], None]) -> "JsonApiSerializer":
        for name in _parse_names(excludes):
            self.requested_excludes.add(name)
        return self

    def create_data(self, resource: Optional[Resource]) -> Dict[str, Any]:
        """
        Serialize a resource.

        Returns:
            {"data": ..., "included"?: [...], "meta"?: {"pagination": {...}}}
        """
        included: Dict[Tuple[str, str], Dict[str, Any]] = {}

        if resource is None:
            return {"data": None}

        if isinstance(resource, Item):
            data: Any = None
            if resource.data is not None:
                data = self._resource_object(
                    resource.data, resource.transformer, resource.resource_key, "", included
                )
        else:
            data = [
                self._resource_object(model, resource.transformer, resource.resource_key, "", included)
                for model in resource.data
            ]

        document: Dict[str, Any] = {"data": data}
        if included:
            document["included"] = list(included.values())
        if isinstance(resource, Collection) and resource.paginator is not None:
            document["meta"] = {"pagination": self._pagination(resource.paginator)}
        return document

    def _pagination(self, page: "Page") -> Dict[str, int]:
        return {
            "total": page.total,
            "count": page.count(),
            "per_page": page.per_page,
            "current_page": page.current_page,
            "total_pages": page.last_page,
        }

    def _includes_for(self, transformer: "BaseTransformer", scope: str) -> List[str]:
        if scope and scope.count(".") + 1 >= self.recursion_limit:
            return []

        names: List[str] = []
        for name in list(transformer.default_includes) + list(transformer.available_includes):
            full = f"{scope}.{name}" if scope else name
            if full in self.requested_excludes or name in names:
                continue
            if name in transformer.default_includes or full in self.requested_includes:
                names.append(name)
        return names

    def _identifier(self, model: Any, attributes: Dict[str, Any]) -> Optional[str]:
        """Pop the mapper primary key out of the attributes; composite keys join with ","."""
        mapper = inspect(type(model), raiseerr=False)
        if mapper is None:
            value = attributes.pop("id", None)
            return str(value) if value is not None else None

        values = []
        for column in mapper.primary_key:
            key = mapper.get_property_by_column(column).key
            value = attributes.pop(key) if key in attributes else getattr(model, key, None)
            if value is None:
                return None
            values.append(str(value))
        return ",".join(values)

    def _resource_object(
        self,
        model: Any,
        transformer: "BaseTransformer",
        resource_key: str,
        scope: str,
        included: Dict[Tuple[str, str], Dict[str, Any]],
    ) -> Dict[str, Any]:
        attributes = dict(transformer.transform(model))
        obj: Dict[str, Any] = {
            "type": resource_key,
            "id": self._identifier(model, attributes),
            "attributes": attributes,
        }

        relationships: Dict[str, Any] = {}
        for name in self._includes_for(transformer, scope):
            full = f"{scope}.{name}" if scope else name
            nested = transformer.call_include(name, model)
            if nested is None:
                relationships[name] = {"data": None}
            elif isinstance(nested, Item):
                if nested.data is None:
                    relationships[name] = {"data": None}
                    continue
                child = self._resource_object(
                    nested.data, nested.transformer, nested.resource_key, full, included
                )
                relationships[name] = {"data": {"type": child["type"], "id": child["id"]}}
                included.setdefault((child["type"], child["id"]), child)
            else:
                identifiers = []
                for nested_model in nested.data:
                    child = self._resource_object(
                        nested_model, nested.transformer, nested.resource_key, full, included
                    )
                    identifiers.append({"type": child["type"], "id": child["id"]})
                    included.setdefault((child["type"], child["id"]), child)
                relationships[name] = {"data": identifiers}

        if relationships:
            obj["relationships"] = relationships
        return obj
