"""String helpers for deriving resource keys from model class names."""

import re

# Irregular plurals that don't follow standard rules
_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "foot": "feet",
    "tooth": "teeth",
    "goose": "geese",
    "mouse": "mice",
    "ox": "oxen",
    "datum": "data",
    "medium": "media",
    "criterion": "criteria",
    "index": "indices",
    "status": "statuses",
}

# Same form in singular and plural
_UNCOUNTABLE = {"equipment", "information", "money", "news", "series", "species", "sheep", "fish"}


def pluralize(word: str) -> str:
    """
    Convert a singular English word to its plural form.

    Examples:
        >>> pluralize("user")
        'users'
        >>> pluralize("category")
        'categories'
        >>> pluralize("person")
        'people'
    """
    if not word:
        return word

    lower_word = word.lower()

    if lower_word in _UNCOUNTABLE:
        return word

    if lower_word in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[lower_word]
        if word[0].isupper():
            return plural.capitalize()
        return plural

    # CamelCase: only the last word changes (BlogPost -> BlogPosts)
    camel_match = re.match(r"^(.+)([A-Z][a-z]+)$", word)
    if camel_match:
        prefix, last_word = camel_match.groups()
        if prefix and last_word != word:
            return prefix + pluralize(last_word)

    if lower_word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if lower_word.endswith("y"):
        if len(word) > 1 and lower_word[-2] in "aeiou":
            return word + "s"
        return word[:-1] + "ies"
    if lower_word.endswith("f"):
        if lower_word.endswith(("elf", "alf", "olf", "eaf", "oaf", "arf")):
            return word[:-1] + "ves"
        return word + "s"
    if lower_word.endswith("fe"):
        return word[:-2] + "ves"
    if lower_word.endswith(("hero", "potato", "tomato", "echo", "veto")):
        return word + "es"
    return word + "s"


def resource_key_for(class_name: str) -> str:
    """Pluralize the class name's last word, then lower-case it (``SalesPerson`` -> ``salespeople``)."""
    return pluralize(class_name).lower()
