"""Tests for transformers and JSON:API serialization."""

import pytest
from support_models import KeyedUser, Newsletter

from crudcore.database.repository import BaseRepository, Page
from crudcore.database.schema import Post, User
from crudcore.errors import ManagerConfigError
from crudcore.transformers.base import BaseTransformer
from crudcore.transformers.posts import PostTransformer
from crudcore.transformers.serializer import Collection, Item, JsonApiSerializer
from crudcore.transformers.users import UserTransformer


@pytest.fixture
def user_with_posts(session, user_data):
    user = BaseRepository(User, session).store(user_data)
    posts = BaseRepository(Post, session)
    posts.store({"user_id": user.id, "title": "First", "body": "Hello"})
    posts.store({"user_id": user.id, "title": "Second", "body": "x" * 200})
    session.refresh(user)
    return user


def test_transform_returns_column_attributes(session):
    newsletter = BaseRepository(Newsletter, session).store({"title": "Weekly"})

    assert BaseTransformer().transform(newsletter) == {"id": newsletter.id, "title": "Weekly"}


def test_transform_leaves_out_hidden_attributes(session, user_data):
    user = BaseRepository(User, session).store(user_data)
    data = UserTransformer().transform(user)

    assert list(data) == ["id", "name", "email", "enabled", "created_at"]
    assert "password" not in data


def test_post_transformer_adds_excerpt(user_with_posts):
    long_post = user_with_posts.posts[1]
    assert len(PostTransformer().transform(long_post)["excerpt"]) == 140


def test_missing_include_method_raises(session, user_data):
    class BrokenTransformer(BaseTransformer):
        available_includes = ["friends"]

    user = BaseRepository(User, session).store(user_data)
    with pytest.raises(ManagerConfigError, match="include_friends"):
        BrokenTransformer().call_include("friends", user)


def test_item_document(session, user_data):
    user = BaseRepository(User, session).store(user_data)
    document = JsonApiSerializer().create_data(Item(user, UserTransformer(), "users"))

    assert document["data"]["type"] == "users"
    assert document["data"]["id"] == str(user.id)
    assert "id" not in document["data"]["attributes"]
    assert document["data"]["attributes"]["email"] == user_data["email"]
    assert "relationships" not in document["data"]
    assert "included" not in document


def test_item_id_is_the_mapper_primary_key(session):
    keyed = BaseRepository(KeyedUser, session).store({"custom_primary_key": "abc"})
    document = JsonApiSerializer().create_data(Item(keyed, BaseTransformer(), "users_key"))

    assert document["data"]["id"] == str(keyed.id)
    assert document["data"]["attributes"] == {"custom_primary_key": "abc"}


def test_nested_managers_receive_settings(user_with_posts):
    settings = {"default_limit": 3}
    nested = UserTransformer(settings).include_posts(user_with_posts)

    assert nested.transformer.settings == settings
    assert isinstance(nested.transformer, PostTransformer)
    assert nested.transformer.include_user(user_with_posts.posts[0]).transformer.settings == settings


def test_empty_item_and_collection():
    serializer = JsonApiSerializer()

    assert serializer.create_data(None) == {"data": None}
    assert serializer.create_data(Item(None, BaseTransformer(), "users")) == {"data": None}
    assert serializer.create_data(Collection([], BaseTransformer(), "users")) == {"data": []}


def test_collection_with_pagination_meta(session, users_array):
    repository = BaseRepository(User, session)
    for user in users_array:
        repository.store(user)

    page = repository.paginate(4, page=2)
    document = JsonApiSerializer().create_data(
        Collection(page.items, UserTransformer(), "users", paginator=page)
    )

    assert [resource["id"] for resource in document["data"]] == ["5", "6"]
    assert document["meta"]["pagination"] == {
        "total": 6,
        "count": 2,
        "per_page": 4,
        "current_page": 2,
        "total_pages": 2,
    }


def test_requested_include_adds_relationships_and_included(user_with_posts):
    serializer = JsonApiSerializer().parse_includes("posts")
    document = serializer.create_data(Item(user_with_posts, UserTransformer(), "users"))

    relationship = document["data"]["relationships"]["posts"]["data"]
    assert relationship == [
        {"type": "posts", "id": str(post.id)} for post in user_with_posts.posts
    ]
    assert [resource["type"] for resource in document["included"]] == ["posts", "posts"]
    assert document["included"][0]["attributes"]["title"] == "First"


def test_nested_includes_are_deduplicated(user_with_posts):
    serializer = JsonApiSerializer().parse_includes("posts.user")
    document = serializer.create_data(Item(user_with_posts, UserTransformer(), "users"))

    included_keys = [(resource["type"], resource["id"]) for resource in document["included"]]
    assert len(included_keys) == len(set(included_keys))
    assert ("users", str(user_with_posts.id)) in included_keys
    assert "posts" in serializer.requested_includes


def test_excludes_win_over_includes(user_with_posts):
    serializer = JsonApiSerializer().parse_includes("posts").parse_excludes("posts")
    document = serializer.create_data(Item(user_with_posts, UserTransformer(), "users"))

    assert "relationships" not in document["data"]
    assert "included" not in document


def test_default_includes_are_always_rendered(user_with_posts):
    class EagerPostTransformer(PostTransformer):
        default_includes = ["user"]

    post = user_with_posts.posts[0]
    document = JsonApiSerializer().create_data(Item(post, EagerPostTransformer(), "posts"))

    assert document["data"]["relationships"]["user"]["data"] == {
        "type": "users",
        "id": str(user_with_posts.id),
    }
    assert "password" not in document["included"][0]["attributes"]


def test_missing_relation_renders_null(session):
    orphan = Post(title="Orphan")
    document = JsonApiSerializer().parse_includes("user").create_data(
        Collection([orphan], PostTransformer(), "posts", paginator=Page())
    )

    assert document["data"][0]["relationships"]["user"] == {"data": None}
