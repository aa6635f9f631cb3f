"""Hebrew-aware ordering of agent names.

Python's ``locale.strxfrm`` depends on which locales the host has installed,
so the Hebrew ordering the booking form expects (alef to tav, final letters equal to
their regular forms, Hebrew before Latin) is built here from Unicode data.
"""

import unicodedata
from typing import Callable, Iterable, TypeVar

T = TypeVar("T")

# Final forms collate as the regular letter
_FINAL_LETTERS = str.maketrans({
    "\u05da": "\u05db",
    "\u05dd": "\u05de",
    "\u05df": "\u05e0",
    "\u05e3": "\u05e4",
    "\u05e5": "\u05e6",
})


def _char_group(ch: str) -> int:
    if ch.isspace() or not ch.isalnum():
        return 0
    if ch.isdigit():
        return 1
    if "\u05d0" <= ch <= "\u05ea":
        return 2
    return 3


def _strip_marks(text: str) -> str:
    # Niqqud and other combining marks do not affect primary ordering
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def hebrew_sort_key(text: str) -> tuple:
    """Sort key approximating Hebrew (``he``) collation."""
    base = _strip_marks(unicodedata.normalize("NFKC", text or "")).casefold()
    base = base.translate(_FINAL_LETTERS)
    primary = tuple((_char_group(ch), ch) for ch in base)
    # Ties (e.g. final vs. regular letter) fall back to the raw text
    return primary, text or ""


def sort_by_name(items: Iterable[T], name: Callable[[T], str]) -> list[T]:
    """Return ``items`` ordered by ``name(item)`` using Hebrew collation."""
    return sorted(items, key=lambda item: hebrew_sort_key(name(item)))
