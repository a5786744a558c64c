"""Tests for the generic SQLAlchemy repository."""

import pytest

from crudcore.database.repository import BaseRepository, Page
from crudcore.database.schema import User
from crudcore.errors import (
    DeleteError,
    ManagerConfigError,
    NotFoundError,
    StoreError,
    UpdateError,
)


def _repository(session, model=User):
    return BaseRepository(model, session)


def _assert_same_model(expected, actual):
    assert type(expected) is type(actual)
    assert expected.id == actual.id


def test_set_and_get_model(session):
    repository = BaseRepository(session=session)
    assert repository.get_model() is None

    repository.set_model(User)
    assert repository.get_model() is User


def test_unbound_repository_is_a_config_error():
    with pytest.raises(ManagerConfigError):
        BaseRepository(User).all()
    with pytest.raises(ManagerConfigError):
        BaseRepository().all()


def test_store_model(session, user_data):
    user = _repository(session).store(user_data)

    assert isinstance(user, User)
    assert user.id is not None
    assert user.email == user_data["email"]
    assert user.enabled is False


def test_store_rejects_unknown_attribute(session, user_data):
    with pytest.raises(StoreError) as exc_info:
        _repository(session).store({**user_data, "nickname": "jd"})

    assert exc_info.value.code == "10005"
    assert exc_info.value.status == "400"
    assert "nickname" in exc_info.value.details


def test_store_rejects_constraint_violation_and_recovers(session, user_data):
    repository = _repository(session)
    repository.store(user_data)

    with pytest.raises(StoreError):
        repository.store({**user_data, "name": "Duplicate"})

    # Session is usable again after the rollback
    assert len(repository.all()) == 1


def test_update_model(session, user_data):
    repository = _repository(session)
    user = repository.store(user_data)
    updated = repository.update(user.id, {"enabled": True})

    assert isinstance(updated, User)
    assert updated.enabled is True


def test_update_unknown_attribute_is_rejected(session, user_data):
    repository = _repository(session)
    user = repository.store(user_data)

    with pytest.raises(UpdateError) as exc_info:
        repository.update(user.id, {"nickname": "jd"})

    assert exc_info.value.code == "10006"
    assert "nickname" in exc_info.value.details


def test_update_constraint_violation_is_rejected(session, users_array):
    repository = _repository(session)
    first = repository.store(users_array[0])
    repository.store(users_array[1])

    with pytest.raises(UpdateError):
        repository.update(first.id, {"email": users_array[1]["email"]})

    assert repository.get_one_by_id(first.id).email == users_array[0]["email"]


def test_update_missing_model_raises_not_found(session):
    with pytest.raises(NotFoundError) as exc_info:
        _repository(session).update(999, {"enabled": True})

    assert exc_info.value.code == "10002"
    assert exc_info.value.status == "404"


def test_update_by_primary_key_on_missing_email_fails_before_update(session):
    repository = _repository(session)

    with pytest.raises(NotFoundError) as exc_info:
        repository.update_by_primary_key("email", "x@y.com", {"enabled": True})

    assert exc_info.value.code == "10003"
    assert "x@y.com" in exc_info.value.details
    assert repository.all() == []


def test_delete_model(session, user_data):
    repository = _repository(session)
    user = repository.store(user_data)

    deleted = repository.delete(user.id)
    assert deleted.email == user_data["email"]

    with pytest.raises(NotFoundError) as exc_info:
        repository.get_one_by_id(user.id)
    assert exc_info.value.code == "10002"


def test_update_model_by_primary_key(session, user_data):
    repository = _repository(session)
    user = repository.store(user_data)
    updated = repository.update_by_primary_key("email", user.email, {"enabled": True})

    assert isinstance(updated, User)
    assert updated.enabled is True


def test_delete_model_by_primary_key(session, user_data):
    repository = _repository(session)
    user = repository.store(user_data)

    repository.delete_by_primary_key("email", user.email)

    with pytest.raises(NotFoundError):
        repository.get_one_by_id(user.id)


def test_delete_failure_is_a_server_error(session, user_data, monkeypatch):
    from sqlalchemy.exc import OperationalError

    repository = _repository(session)
    user = repository.store(user_data)

    def failing_commit():
        raise OperationalError("DELETE FROM users", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "commit", failing_commit)

    with pytest.raises(DeleteError) as exc_info:
        repository.delete(user.id)

    assert exc_info.value.status == "500"
    assert exc_info.value.code == "10003"
    assert "database is locked" in exc_info.value.details


def test_get_one_model_functions(session, user_data):
    repository = _repository(session)
    user = repository.store(user_data)

    by_id = repository.get_one_by_id(user.id)
    by_attribute = repository.get_one_by_attribute("email", user.email)
    by_attributes = repository.get_one_by_attributes({"name": user.name, "email": user.email})

    _assert_same_model(user, by_id)
    _assert_same_model(user, by_attribute)
    _assert_same_model(user, by_attributes)


def test_get_one_by_attributes_not_found_describes_lookup(session):
    with pytest.raises(NotFoundError) as exc_info:
        _repository(session).get_one_by_attributes({"email": "nobody@example.com"})

    error = exc_info.value
    assert error.code == "10003"
    assert error.kind == NotFoundError.KIND_ITEM_BY_ATTRIBUTES
    assert '"email": "nobody@example.com"' in error.details


def test_get_one_by_unknown_attribute_is_not_found(session):
    with pytest.raises(NotFoundError):
        _repository(session).get_one_by_attribute("nickname", "jd")


def test_get_multiple_models_functions(session, users_array):
    repository = _repository(session)
    for user in users_array:
        repository.store(user)

    by_attribute = repository.get_by_attribute("enabled", True)
    by_attributes = repository.get_by_attributes({"enabled": False, "password": "password"})

    assert isinstance(by_attribute, list)
    assert len(by_attribute) == 2
    assert len(by_attributes) == 4
    assert all(user.enabled is True for user in by_attribute)
    assert all(user.enabled is False and user.password == "password" for user in by_attributes)


def test_get_by_attributes_empty_is_not_an_error(session):
    assert _repository(session).get_by_attribute("enabled", True) == []


def test_get_by_unknown_attribute_raises_items_not_found(session):
    with pytest.raises(NotFoundError) as exc_info:
        _repository(session).get_by_attribute("nickname", "jd")

    assert exc_info.value.code == "10004"
    assert exc_info.value.kind == NotFoundError.KIND_ITEMS


def test_get_all_models(session, users_array):
    repository = _repository(session)
    assert len(repository.all()) == 0

    for user in users_array:
        repository.store(user)

    assert len(repository.all()) == 6


def test_get_paginate_models(session, users_array):
    repository = _repository(session)

    page = repository.paginate(2)
    assert isinstance(page, Page)
    assert page.count() == 0
    assert page.total == 0
    assert page.last_page == 1

    for user in users_array:
        repository.store(user)

    page = repository.paginate(2)
    assert page.count() == 2
    assert page.total == 6
    assert page.last_page == 3
    assert page.has_more_pages() is True

    last = repository.paginate(4, page=2)
    assert last.count() == 2
    assert last.current_page == 2
    assert last.has_more_pages() is False


def test_store_rejects_relationship_inputs(session, user_data):
    repository = _repository(session)

    with pytest.raises(StoreError) as exc_info:
        repository.store({**user_data, "posts": [1]})

    assert exc_info.value.code == "10005"
    assert "posts" in exc_info.value.details
    assert repository.all() == []
