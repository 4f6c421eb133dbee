"""
String helpers for deriving REST route names from model names.

Route names are lowercase plurals of the model's table name, e.g. a ``user``
table is served under ``/users`` and a ``WorkOrder`` table under
``/workorders``.
"""

from __future__ import annotations

import re

_IRREGULAR = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "datum": "data",
    "medium": "media",
    "criterion": "criteria",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "status": "statuses",
    "address": "addresses",
}

# (suffix, characters to drop, replacement), first match wins
_SUFFIX_RULES: tuple[tuple[str, int, str], ...] = (
    ("ay", 0, "s"),
    ("ey", 0, "s"),
    ("oy", 0, "s"),
    ("uy", 0, "s"),
    ("y", 1, "ies"),
    ("s", 0, "es"),
    ("x", 0, "es"),
    ("z", 0, "es"),
    ("ch", 0, "es"),
    ("sh", 0, "es"),
    ("elf", 1, "ves"),
    ("alf", 1, "ves"),
    ("olf", 1, "ves"),
    ("eaf", 1, "ves"),
    ("fe", 2, "ves"),
    ("hero", 0, "es"),
    ("potato", 0, "es"),
    ("tomato", 0, "es"),
    ("echo", 0, "es"),
)

# Trailing capitalised word of a CamelCase name: IBG|Policy, Work|Order
_LAST_CAMEL_WORD = re.compile(r"^(.+?)([A-Z][a-z]+)$")


def pluralize(word: str) -> str:
    """
    Plural of a singular English word or identifier.

    CamelCase and snake_case names pluralize their last word only.

    Examples:
        >>> pluralize("user")
        'users'
        >>> pluralize("IBGPolicy")
        'IBGPolicies'
        >>> pluralize("line_item")
        'line_items'
        >>> pluralize("Person")
        'People'
    """
    if not word:
        return word

    head, sep, tail = word.rpartition("_")
    if sep and head.strip("_") and tail:
        return f"{head}_{pluralize(tail)}"

    irregular = _IRREGULAR.get(word.lower())
    if irregular is not None:
        return irregular.capitalize() if word[0].isupper() else irregular

    camel = _LAST_CAMEL_WORD.match(word)
    if camel:
        prefix, last = camel.groups()
        return prefix + pluralize(last)

    lower = word.lower()
    for suffix, drop, replacement in _SUFFIX_RULES:
        if lower.endswith(suffix):
            stem = word[: len(word) - drop] if drop else word
            return stem + replacement
    return word + "s"


def to_api_plural(table_name: str) -> str:
    """
    Route segment a model with this table name is served under.

    Examples:
        >>> to_api_plural("WorkOrder")
        'workorders'
    """
    return pluralize(table_name).lower()
