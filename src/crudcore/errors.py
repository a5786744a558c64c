"""Error model for crudcore.

Two families live here:

1. ``StructuredError`` and its kinds: expected, user-facing outcomes carrying an
   HTTP status, a stable internal code, a title and details. They are rendered
   as JSON error objects by the response manager.
2. ``ManagerConfigError``: a misconfigured model or manager. It is a deployment
   defect and is never rendered with details to the end user.
"""

import json
from typing import Any, Dict, List, Optional

# Stable internal codes (wire contract)
CODE_VALIDATION = "10001"
CODE_ITEM_NOT_FOUND_BY_ID = "10002"
CODE_ITEM_NOT_FOUND_BY_ATTRIBUTES = "10003"
CODE_DELETE_FAILED = "10003"
CODE_ITEMS_NOT_FOUND = "10004"
CODE_STORE_FAILED = "10005"
CODE_UPDATE_FAILED = "10006"


class ManagerConfigError(RuntimeError):
    """Raised when a model or manager is misconfigured."""


class ErrorDefinitionError(ValueError):
    """Raised when a structured error misses one of its required fields."""


class StructuredError(Exception):
    """Base class for user-facing errors rendered as JSON error objects."""

    REQUIRED_FIELDS = ("code", "title", "details")

    # Defaults for subclasses
    default_status: Optional[str] = None
    default_code: Optional[str] = None
    default_title: Optional[str] = None

    def __init__(
        self,
        details: Optional[str] = None,
        *,
        status: Optional[str] = None,
        code: Optional[str] = None,
        title: Optional[str] = None,
        href: Optional[str] = None,
        links: Optional[Dict[str, Any]] = None,
        path: Optional[str] = None,
        meta: Optional[Dict[str, Any]] = None,
    ):
        self.status = str(status) if status is not None else self.default_status
        self.code = code if code is not None else self.default_code
        self.title = title if title is not None else self.default_title
        self.details = details
        self.href = href
        self.links = links
        self.path = path
        self.meta = meta
        super().__init__(self.title or details or self.__class__.__name__)

    def __str__(self) -> str:
        if self.title and self.details:
            return f"{self.title}: {self.details}"
        return self.title or self.details or self.__class__.__name__

    # Fluent setters

    def set_status(self, status: Any) -> "StructuredError":
        """HTTP status associated with this error."""
        self.status = str(status)
        return self

    def set_internal_code(self, code: str) -> "StructuredError":
        """Application specific error code."""
        self.code = code
        return self

    def set_title(self, title: str) -> "StructuredError":
        """Short human-readable summary of the error."""
        self.title = title
        self.args = (title,)
        return self

    def set_details(self, details: str) -> "StructuredError":
        """Human-readable explanation specific to this occurrence."""
        self.details = details
        return self

    def set_href(self, href: str) -> "StructuredError":
        self.href = href
        return self

    def set_links(self, links: Dict[str, Any]) -> "StructuredError":
        self.links = links
        return self

    def set_path(self, path: str) -> "StructuredError":
        """Relative path to the relevant attribute within the resource."""
        self.path = path
        return self

    def set_meta(self, meta: Dict[str, Any]) -> "StructuredError":
        self.meta = meta
        return self

    # Getters

    def get_status(self) -> Optional[str]:
        return self.status

    def get_internal_code(self) -> Optional[str]:
        return self.code

    def get_title(self) -> Optional[str]:
        return self.title

    def get_details(self) -> Optional[str]:
        return self.details

    def get_href(self) -> Optional[str]:
        return self.href

    def get_links(self) -> Optional[Dict[str, Any]]:
        return self.links

    def get_path(self) -> Optional[str]:
        return self.path

    def get_meta(self) -> Optional[Dict[str, Any]]:
        return self.meta

    @property
    def status_code(self) -> int:
        """Integer HTTP status, 500 when unset or malformed."""
        try:
            return int(self.status)
        except (TypeError, ValueError):
            return 500

    def to_dict(self) -> Dict[str, Any]:
        """
        Get the wire representation of the error.

        Null fields are omitted.

        Raises:
            ErrorDefinitionError: If code, title or details is missing
        """
        for field in self.REQUIRED_FIELDS:
            if getattr(self, field) is None:
                raise ErrorDefinitionError(
                    f"Property {field} required on {self.__class__.__name__}."
                )

        error: Dict[str, Any] = {}
        for field in ("status", "code", "title", "details", "href", "links", "path", "meta"):
            value = getattr(self, field)
            if value is not None:
                error[field] = value
        return error


class _DetailedError(StructuredError):
    """Structured error kind whose details are mandatory at construction."""

    def __init__(self, details: str, **kwargs: Any):
        if details is None:
            raise ErrorDefinitionError(f"{self.__class__.__name__} requires details.")
        super().__init__(details, **kwargs)


class ValidationError(_DetailedError):
    default_status = "400"
    default_code = CODE_VALIDATION
    default_title = "Data validation"

    @classmethod
    def from_messages(cls, messages: List[str]) -> "ValidationError":
        return cls(", ".join(messages))


class NotFoundError(_DetailedError):
    """
    Lookup failure.

    ``kind`` is one of ``item_by_id``, ``item_by_attributes`` or ``items``.
    """

    default_status = "404"
    default_title = "Item not found"

    KIND_ITEM_BY_ID = "item_by_id"
    KIND_ITEM_BY_ATTRIBUTES = "item_by_attributes"
    KIND_ITEMS = "items"

    def __init__(self, details: str, kind: str = KIND_ITEM_BY_ATTRIBUTES, **kwargs: Any):
        self.kind = kind
        if kind == self.KIND_ITEM_BY_ID:
            kwargs.setdefault("code", CODE_ITEM_NOT_FOUND_BY_ID)
        elif kind == self.KIND_ITEMS:
            kwargs.setdefault("code", CODE_ITEMS_NOT_FOUND)
            kwargs.setdefault("title", "Items not found")
        else:
            kwargs.setdefault("code", CODE_ITEM_NOT_FOUND_BY_ATTRIBUTES)
        super().__init__(details, **kwargs)

    @classmethod
    def item_by_id(cls, item_id: Any) -> "NotFoundError":
        return cls(f"Item with id {item_id} does not exist.", kind=cls.KIND_ITEM_BY_ID)

    @classmethod
    def item_by_attributes(cls, attributes: Dict[str, Any], reason: Optional[str] = None) -> "NotFoundError":
        details = f"Item with attributes {json.dumps(attributes, default=str)} does not exist."
        if reason:
            details = f"{details} {reason}"
        return cls(details, kind=cls.KIND_ITEM_BY_ATTRIBUTES)

    @classmethod
    def items(cls, reason: str) -> "NotFoundError":
        return cls(f"Items cannot be retrieved: {reason}", kind=cls.KIND_ITEMS)


class StoreError(_DetailedError):
    default_status = "400"
    default_code = CODE_STORE_FAILED
    default_title = "Item cannot be stored"


class UpdateError(_DetailedError):
    default_status = "400"
    default_code = CODE_UPDATE_FAILED
    default_title = "Item cannot be updated"


class DeleteError(_DetailedError):
    default_status = "500"
    default_code = CODE_DELETE_FAILED
    default_title = "Item cannot be deleted"
