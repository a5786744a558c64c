"""Per-model resource configuration.

A model declares how the managers treat it through a ``ResourceConfig``, either
as its ``__resource__`` class attribute or through ``register_resource``. The
registry takes precedence so third-party models can be configured without
touching their class.
"""

import importlib
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic import ValidationError as PydanticValidationError

from ..errors import ManagerConfigError

RESOURCE_ATTRIBUTE = "__resource__"

ClassRef = Union[str, Type[Any]]


class ResourceConfig(BaseModel):
    """Configuration a model supplies to its manager. Every field is optional."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid", frozen=True)

    repository: Optional[ClassRef] = None  # class or "package.module.Class"
    transformer: Optional[ClassRef] = None
    key: Optional[str] = None  # display key used as the JSON:API type
    primary_key: Optional[str] = None
    rules: Optional[Dict[str, Dict[str, Any]]] = None
    limit: Optional[PositiveInt] = None
    hidden: List[str] = Field(default_factory=list)


_REGISTRY: Dict[type, ResourceConfig] = {}

_EMPTY = ResourceConfig()


def _coerce(model: type, value: Any) -> ResourceConfig:
    if isinstance(value, ResourceConfig):
        return value
    if isinstance(value, dict):
        try:
            return ResourceConfig(**value)
        except PydanticValidationError as e:
            raise ManagerConfigError(
                f"Model {model.__name__} defines an invalid resource configuration: {e}"
            ) from e
    raise ManagerConfigError(
        f"Model {model.__name__} defines {RESOURCE_ATTRIBUTE} as {type(value).__name__}, "
        f"expected ResourceConfig or dict."
    )


def register_resource(model: type, config: Union[ResourceConfig, Dict[str, Any]]) -> ResourceConfig:
    """Register configuration for a model class, replacing any earlier entry."""
    resolved = _coerce(model, config)
    _REGISTRY[model] = resolved
    return resolved


def unregister_resource(model: type) -> None:
    _REGISTRY.pop(model, None)


def resource_config(model: type) -> ResourceConfig:
    """Resolve configuration for a model class: registry, class attribute, then empty."""
    if model in _REGISTRY:
        return _REGISTRY[model]
    declared = getattr(model, RESOURCE_ATTRIBUTE, None)
    if declared is None:
        return _EMPTY
    return _coerce(model, declared)


def resolve_class(model: type, field: str, ref: ClassRef) -> Type[Any]:
    """
    Resolve a declared class reference.

    Raises:
        ManagerConfigError: If the path cannot be imported or is not a class
    """
    if isinstance(ref, type):
        return ref

    module_path, _, class_name = ref.replace(":", ".").rpartition(".")
    try:
        if not module_path:
            raise ImportError(f"no module in {ref!r}")
        resolved = getattr(importlib.import_module(module_path), class_name)
    except (ImportError, AttributeError) as e:
        raise ManagerConfigError(
            f"Model {model.__name__} defines property {field} as {ref} but class does not exist."
        ) from e

    if not isinstance(resolved, type):
        raise ManagerConfigError(
            f"Model {model.__name__} defines property {field} as {ref} but it is not a class."
        )
    return resolved
