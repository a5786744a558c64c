"""Generic repository over one SQLAlchemy mapped model.

Every persistence failure is caught here and re-raised as a structured error;
raw SQLAlchemy exceptions never leave this module.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import DeleteError, ManagerConfigError, NotFoundError, StoreError, UpdateError
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Page:
    """One page of records plus the metadata needed to render pagination."""
    items: List[Any] = field(default_factory=list)
    total: int = 0
    per_page: int = 15
    current_page: int = 1

    @property
    def last_page(self) -> int:
        if self.total == 0:
            return 1
        return max(1, math.ceil(self.total / self.per_page))

    def count(self) -> int:
        """Number of records on this page."""
        return len(self.items)

    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)


class BaseRepository:
    """CRUD operations for a single mapped model class bound to a session."""

    def __init__(self, model: Optional[type] = None, session: Optional[Session] = None):
        self.model = model
        self.session = session

    def set_model(self, model: type) -> "BaseRepository":
        self.model = model
        return self

    def get_model(self) -> Optional[type]:
        return self.model

    def set_session(self, session: Session) -> "BaseRepository":
        self.session = session
        return self

    def get_session(self) -> Optional[Session]:
        return self.session

    def _bound(self) -> Session:
        if self.model is None:
            raise ManagerConfigError(f"{self.__class__.__name__} has no model bound.")
        if self.session is None:
            raise ManagerConfigError(
                f"{self.__class__.__name__} for {self.model.__name__} has no session bound."
            )
        return self.session

    def _rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError as e:
            logger.warning("Rollback failed for %s: %s", self.model.__name__, e)

    # Reads

    def all(self) -> List[Any]:
        """Get all records of the model."""
        session = self._bound()
        try:
            return list(session.scalars(select(self.model)).all())
        except SQLAlchemyError as e:
            logger.warning("Listing %s failed: %s", self.model.__name__, e)
            raise NotFoundError.items(str(e)) from e

    def paginate(self, limit: int, page: int = 1) -> Page:
        """
        Get one page of records.

        Args:
            limit: Number of records per page
            page: 1-based page number

        Returns:
            Page with at most ``limit`` records
        """
        session = self._bound()
        limit = max(1, int(limit))
        page = max(1, int(page))
        try:
            total = session.scalar(select(func.count()).select_from(self.model)) or 0
            stmt = select(self.model).limit(limit).offset((page - 1) * limit)
            items = list(session.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.warning("Paginating %s failed: %s", self.model.__name__, e)
            raise NotFoundError.items(str(e)) from e
        return Page(items=items, total=total, per_page=limit, current_page=page)

    def get_one_by_id(self, item_id: Any) -> Any:
        """
        Get one record by its mapper primary key.

        Raises:
            NotFoundError: If no record has this id (code 10002)
        """
        session = self._bound()
        try:
            found = session.get(self.model, item_id)
        except SQLAlchemyError as e:
            logger.warning("Loading %s id=%s failed: %s", self.model.__name__, item_id, e)
            raise NotFoundError.item_by_id(item_id) from e
        if found is None:
            raise NotFoundError.item_by_id(item_id)
        return found

    def get_one_by_attribute(self, attribute: str, value: Any) -> Any:
        return self.get_one_by_attributes({attribute: value})

    def get_one_by_attributes(self, attributes: Dict[str, Any]) -> Any:
        """
        Get the first record matching every attribute.

        Raises:
            NotFoundError: If nothing matches or an attribute is unknown (code 10003)
        """
        session = self._bound()
        try:
            found = session.scalars(select(self.model).filter_by(**attributes).limit(1)).first()
        except SQLAlchemyError as e:
            logger.warning("Lookup of %s by %s failed: %s", self.model.__name__, attributes, e)
            raise NotFoundError.item_by_attributes(attributes, str(e)) from e
        if found is None:
            raise NotFoundError.item_by_attributes(attributes)
        return found

    def get_by_attribute(self, attribute: str, value: Any) -> List[Any]:
        return self.get_by_attributes({attribute: value})

    def get_by_attributes(self, attributes: Dict[str, Any]) -> List[Any]:
        """Get every record matching the attributes; an empty list is not an error."""
        session = self._bound()
        try:
            return list(session.scalars(select(self.model).filter_by(**attributes)).all())
        except SQLAlchemyError as e:
            logger.warning("Lookup of %s by %s failed: %s", self.model.__name__, attributes, e)
            raise NotFoundError.items(str(e)) from e

    # Writes

    def _unknown_attributes(self, inputs: Dict[str, Any]) -> List[str]:
        """Input names that are not column attributes (relationships included)."""
        columns = set(inspect(self.model).column_attrs.keys())
        return sorted(name for name in inputs if name not in columns)

    def store(self, inputs: Dict[str, Any]) -> Any:
        """
        Create and persist a new record.

        Raises:
            StoreError: If the inputs are rejected (code 10005)
        """
        session = self._bound()
        unknown = self._unknown_attributes(inputs)
        if unknown:
            raise StoreError(f"Item cannot be stored: unknown attributes {', '.join(unknown)}.")

        try:
            created = self.model(**inputs)
        except (TypeError, AttributeError, SQLAlchemyError) as e:
            raise StoreError(f"Item cannot be stored: {e}") from e

        try:
            session.add(created)
            session.commit()
            session.refresh(created)
        except SQLAlchemyError as e:
            self._rollback()
            logger.warning("Storing %s failed: %s", self.model.__name__, e)
            raise StoreError(f"Item cannot be stored: {e}") from e

        logger.debug("Stored %s %s", self.model.__name__, inputs.keys())
        return created

    def update(self, item_id: Any, inputs: Dict[str, Any]) -> Any:
        """
        Update a record loaded by id.

        Raises:
            NotFoundError: If the record doesn't exist (code 10002)
            UpdateError: If the update is rejected (code 10006)
        """
        updated = self.get_one_by_id(item_id)
        return self._apply_update(updated, f"id {item_id}", inputs)

    def update_by_primary_key(self, primary_key: str, value: Any, inputs: Dict[str, Any]) -> Any:
        """
        Update a record loaded by a primary-key attribute.

        Raises:
            NotFoundError: If the record doesn't exist (code 10003)
            UpdateError: If the update is rejected (code 10006)
        """
        updated = self.get_one_by_attribute(primary_key, value)
        return self._apply_update(updated, f"{primary_key} {value}", inputs)

    def _apply_update(self, updated: Any, label: str, inputs: Dict[str, Any]) -> Any:
        session = self._bound()
        unknown = self._unknown_attributes(inputs)
        if unknown:
            raise UpdateError(
                f"Item with {label} cannot be updated: unknown attributes {', '.join(unknown)}."
            )

        try:
            for name, value in inputs.items():
                setattr(updated, name, value)
            session.commit()
            session.refresh(updated)
        except SQLAlchemyError as e:
            self._rollback()
            logger.warning("Updating %s with %s failed: %s", self.model.__name__, label, e)
            raise UpdateError(f"Item with {label} cannot be updated: {e}") from e

        logger.debug("Updated %s with %s", self.model.__name__, label)
        return updated

    def delete(self, item_id: Any) -> Any:
        """
        Delete a record loaded by id and return it.

        Raises:
            NotFoundError: If the record doesn't exist (code 10002)
            DeleteError: If removal is rejected (code 10003, status 500)
        """
        deleted = self.get_one_by_id(item_id)
        return self._apply_delete(deleted, f"id {item_id}")

    def delete_by_primary_key(self, primary_key: str, value: Any) -> Any:
        deleted = self.get_one_by_attribute(primary_key, value)
        return self._apply_delete(deleted, f"{primary_key} {value}")

    def _apply_delete(self, deleted: Any, label: str) -> Any:
        session = self._bound()
        try:
            session.delete(deleted)
            session.commit()
        except SQLAlchemyError as e:
            self._rollback()
            logger.warning("Deleting %s with %s failed: %s", self.model.__name__, label, e)
            raise DeleteError(f"Item with {label} cannot be deleted: {e}") from e

        logger.debug("Deleted %s with %s", self.model.__name__, label)
        return deleted
