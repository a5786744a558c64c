"""Tests for resource key derivation."""

import pytest

from crudcore.utils.strings import pluralize, resource_key_for


@pytest.mark.parametrize(
    "word, expected",
    [
        ("user", "users"),
        ("post", "posts"),
        ("category", "categories"),
        ("day", "days"),
        ("address", "addresses"),
        ("box", "boxes"),
        ("leaf", "leaves"),
        ("knife", "knives"),
        ("person", "people"),
        ("Person", "People"),
        ("news", "news"),
        ("BlogPost", "BlogPosts"),
        ("", ""),
    ],
)
def test_pluralize(word, expected):
    assert pluralize(word) == expected


def test_resource_key_for_class_names():
    assert resource_key_for("User") == "users"
    assert resource_key_for("TestUser") == "testusers"
    assert resource_key_for("Category") == "categories"
    assert resource_key_for("SalesPerson") == "salespeople"
