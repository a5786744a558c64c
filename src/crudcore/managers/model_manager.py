"""Model manager: one repository + one transformer for one mapped model type.

Per-model behavior comes from the model's ``ResourceConfig``; anything the model
doesn't declare falls back to the manager settings (``id`` primary key, page
size 15, ``default`` rules set).
"""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import InstanceState, Session

from ..database.repository import BaseRepository, Page
from ..errors import ManagerConfigError, ValidationError
from ..transformers.base import BaseTransformer
from ..utils.logging import get_logger
from ..utils.strings import resource_key_for
from .resource_config import ResourceConfig, resolve_class, resource_config
from .validation import validate_inputs

logger = get_logger(__name__)

# Repository operations reachable through ModelManager.call
REPOSITORY_OPERATIONS = frozenset(
    {
        "all",
        "paginate",
        "get_one_by_id",
        "get_one_by_attribute",
        "get_one_by_attributes",
        "get_by_attribute",
        "get_by_attributes",
        "store",
        "update",
        "update_by_primary_key",
        "delete",
        "delete_by_primary_key",
    }
)


def _is_mapped_instance(value: Any) -> bool:
    state = inspect(value, raiseerr=False)
    return isinstance(state, InstanceState)


class ModelManager:
    PROPERTY_REPOSITORY = "repository"
    PROPERTY_TRANSFORMER = "transformer"

    MODEL_DEFAULT_RULES_SET = "default"
    MODEL_DEFAULT_PRIMARY_KEY = "id"
    MODEL_DEFAULT_LIMIT = 15

    default_classes = {
        PROPERTY_REPOSITORY: BaseRepository,
        PROPERTY_TRANSFORMER: BaseTransformer,
    }

    def __init__(
        self,
        model: Optional[Any] = None,
        session: Optional[Session] = None,
        settings: Optional[Mapping[str, Any]] = None,
    ):
        self.model: Optional[type] = None
        self.session = session
        self.current: Any = None
        self.repository: Optional[BaseRepository] = None
        self.transformer: Optional[BaseTransformer] = None

        self.settings: Dict[str, Any] = dict(settings or {})
        self.default_primary_key = self.settings.get("default_primary_key", self.MODEL_DEFAULT_PRIMARY_KEY)
        self.default_limit = int(self.settings.get("default_limit", self.MODEL_DEFAULT_LIMIT))
        self.default_rules_set = self.settings.get("default_rules_set", self.MODEL_DEFAULT_RULES_SET)

        if model is not None:
            self.set_model(model)

    # Model and session

    def set_model(self, model: Any) -> "ModelManager":
        """Bind the manager to a mapped class (an instance binds to its class)."""
        model_class = model if isinstance(model, type) else type(model)
        if inspect(model_class, raiseerr=False) is None:
            raise ManagerConfigError(f"{model_class.__name__} is not a mapped model class.")
        self.model = model_class
        if self.repository is not None:
            self.repository.set_model(model_class)
        return self

    def get_model(self) -> Optional[type]:
        return self.model

    def set_session(self, session: Session) -> "ModelManager":
        self.session = session
        if self.repository is not None:
            self.repository.set_session(session)
        return self

    def _require_model(self) -> type:
        if self.model is None:
            raise ManagerConfigError("ModelManager has no model bound.")
        return self.model

    def get_config(self) -> ResourceConfig:
        return resource_config(self._require_model())

    # Current result

    def set_current(self, current: Any = None) -> "ModelManager":
        """
        Set the current result.

        Raises:
            ManagerConfigError: If current is not None, a model instance, a
                homogeneous list of model instances or a Page
        """
        if current is None or isinstance(current, Page) or _is_mapped_instance(current):
            self.current = current
            return self

        if isinstance(current, (list, tuple)):
            if all(_is_mapped_instance(item) for item in current) and len({type(item) for item in current}) <= 1:
                self.current = list(current)
                return self

        raise ManagerConfigError(
            f"Current result must be a model, a list of models or a Page, {type(current).__name__} given."
        )

    def get_current(self) -> Any:
        return self.current

    # Collaborators

    def _class_from_config(self, field: str) -> type:
        declared = getattr(self.get_config(), field)
        if declared is None:
            return self.default_classes[field]
        return resolve_class(self._require_model(), field, declared)

    def set_repository(self, repository: BaseRepository, set_model: bool = False) -> "ModelManager":
        self.repository = repository
        if set_model and repository.get_model() is not None:
            self.model = repository.get_model()
        if repository.get_session() is None and self.session is not None:
            repository.set_session(self.session)
        return self

    def get_repository(self) -> BaseRepository:
        """
        Get the model repository, building the declared (or default) one on first use.

        Raises:
            ManagerConfigError: If the declared repository class does not exist
        """
        if self.repository is not None:
            return self.repository

        repository_class = self._class_from_config(self.PROPERTY_REPOSITORY)
        self.repository = repository_class(self._require_model(), self.session)
        return self.repository

    def set_transformer(self, transformer: BaseTransformer) -> "ModelManager":
        self.transformer = transformer
        return self

    def get_transformer(self) -> BaseTransformer:
        """
        Raises:
            ManagerConfigError: If the declared transformer class does not exist
        """
        if self.transformer is not None:
            return self.transformer

        transformer_class = self._class_from_config(self.PROPERTY_TRANSFORMER)
        self.transformer = transformer_class(self.settings)
        return self.transformer

    # Conventions

    def get_model_key(self) -> str:
        """Display key used as the resource type in responses."""
        key = self.get_config().key
        if key:
            return key
        return resource_key_for(self._require_model().__name__)

    def get_model_primary_key(self) -> str:
        """
        Attribute used to look records up from request parameters.

        Raises:
            ManagerConfigError: If the declared primary key is not a mapped column
        """
        model = self._require_model()
        primary_key = self.get_config().primary_key
        if primary_key is None:
            return self.default_primary_key

        columns = inspect(model).column_attrs.keys()
        if primary_key not in columns:
            raise ManagerConfigError(
                f"Model {model.__name__} defines a primary key as primary_key = {primary_key}, "
                f"but this key is not defined in model attributes."
            )
        return primary_key

    def get_model_limit(self) -> int:
        limit = self.get_config().limit
        if limit is None:
            return self.default_limit
        return int(limit)

    # Validation

    def validate(self, inputs: Mapping[str, Any], rule_set: str) -> None:
        """
        Validate inputs against one of the model's rule sets.

        Falls back to the default rule set when ``rule_set`` is absent or empty.

        Raises:
            ManagerConfigError: If the model declares no rules, or neither the
                requested nor the default rule set exists
            ValidationError: If validation fails
        """
        model = self._require_model()
        rules = self.get_config().rules
        if not rules:
            raise ManagerConfigError(f"Model {model.__name__} does not define validation rules.")

        selected = rule_set if rules.get(rule_set) else self.default_rules_set
        if not rules.get(selected):
            raise ManagerConfigError(
                f"Rules set {rule_set} does not exist and no {self.default_rules_set} rules set is defined."
            )

        messages = validate_inputs(inputs, rules[selected])
        if messages:
            logger.debug("Validation of %s with %s failed: %s", model.__name__, selected, messages)
            raise ValidationError.from_messages(messages)

    # Repository delegation

    def call(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        """
        Run one of REPOSITORY_OPERATIONS and keep its result as the current one.

        Raises:
            ManagerConfigError: If the operation is not a repository operation
        """
        if operation not in REPOSITORY_OPERATIONS:
            raise ManagerConfigError(f"{operation} is not a repository operation.")
        result = getattr(self.get_repository(), operation)(*args, **kwargs)
        self.current = result
        return result

    def all(self) -> List[Any]:
        return self.call("all")

    def get_one_by_id(self, item_id: Any) -> Any:
        return self.call("get_one_by_id", item_id)

    def get_one_by_attribute(self, attribute: str, value: Any) -> Any:
        return self.call("get_one_by_attribute", attribute, value)

    def get_one_by_attributes(self, attributes: Dict[str, Any]) -> Any:
        return self.call("get_one_by_attributes", attributes)

    def get_by_attribute(self, attribute: str, value: Any) -> List[Any]:
        return self.call("get_by_attribute", attribute, value)

    def get_by_attributes(self, attributes: Dict[str, Any]) -> List[Any]:
        return self.call("get_by_attributes", attributes)

    def paginate(self, limit: Optional[int] = None, page: int = 1) -> Page:
        """Get one page of models, using the model limit when none is given."""
        if limit is None:
            limit = self.get_model_limit()
        return self.call("paginate", limit, page)

    def show(self, primary_key_value: Any) -> Any:
        """
        Raises:
            NotFoundError: If model not found
        """
        return self.call("get_one_by_attribute", self.get_model_primary_key(), primary_key_value)

    def store(self, inputs: Dict[str, Any]) -> Any:
        return self.call("store", inputs)

    def update(self, primary_key_value: Any, inputs: Dict[str, Any]) -> Any:
        """
        Raises:
            NotFoundError: If model not found
            UpdateError: If the update is rejected
        """
        return self.call("update_by_primary_key", self.get_model_primary_key(), primary_key_value, inputs)

    def delete(self, primary_key_value: Any) -> Any:
        """
        Raises:
            NotFoundError: If model not found
            DeleteError: If model can't be deleted
        """
        return self.call("delete_by_primary_key", self.get_model_primary_key(), primary_key_value)
