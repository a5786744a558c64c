"""Default transformer: a model's own column attributes, nothing else."""

from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from sqlalchemy import inspect

from ..errors import ManagerConfigError
from ..managers.resource_config import resource_config
from .serializer import Collection, Item


class BaseTransformer:
    """
    Turn one model instance into an ordered plain mapping.

    Subclasses list relation names in ``available_includes`` (rendered when
    requested) or ``default_includes`` (always rendered) and implement
    ``include_<name>(model)`` returning an Item, a Collection or None.
    """

    available_includes: List[str] = []
    default_includes: List[str] = []

    def __init__(self, settings: Optional[Mapping[str, Any]] = None):
        # Manager defaults handed on to the managers of nested resources
        self.settings: Dict[str, Any] = dict(settings or {})

    def transform(self, model: Any) -> Dict[str, Any]:
        hidden = set(resource_config(type(model)).hidden)
        mapper = inspect(type(model))
        return OrderedDict(
            (attr.key, getattr(model, attr.key))
            for attr in mapper.column_attrs
            if attr.key not in hidden
        )

    def call_include(self, name: str, model: Any) -> Optional[Union[Item, Collection]]:
        method = getattr(self, f"include_{name}", None)
        if method is None:
            raise ManagerConfigError(
                f"Transformer {self.__class__.__name__} declares include {name} "
                f"but defines no include_{name} method."
            )
        return method(model)

    def include_item(self, model: Any) -> Optional[Item]:
        """Nested single resource rendered with the nested model's own manager config."""
        if model is None:
            return None
        from ..managers.model_manager import ModelManager

        manager = ModelManager(type(model), settings=self.settings)
        return Item(
            model,
            manager.get_transformer(),
            manager.get_model_key(),
        )

    def include_collection(self, model_class: type, records: Iterable[Any]) -> Collection:
        """Nested collection rendered with ``model_class``'s own manager config."""
        from ..managers.model_manager import ModelManager

        manager = ModelManager(model_class, settings=self.settings)
        return Collection(
            records,
            manager.get_transformer(),
            manager.get_model_key(),
        )
