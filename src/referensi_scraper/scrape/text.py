"""Text cleanup shared by the page scrapers."""

import re

_BRACKETED = re.compile(r"\(.*?\)")
_NON_WORD = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_INTEGER = re.compile(r"[+-]?\d+")
_LIST_NUMBER = re.compile(r"^\d+\.\s*")

_PLAIN_STRING_KEYS = frozenset({"npsn"})


def to_camel_case(text: str, *, strip_brackets: bool = False) -> str:
    """``"Nama Satuan Pendidikan"`` -> ``"namaSatuanPendidikan"``.

    With ``strip_brackets`` any ``(...)`` group is dropped first, so
    ``"Jumlah (Total)"`` becomes ``"jumlah"``.
    """
    text = text.lower()
    if strip_brackets:
        text = _BRACKETED.sub("", text)
    words = _WHITESPACE.split(_NON_WORD.sub("", text).strip())
    return words[0] + "".join(word[:1].upper() + word[1:] for word in words[1:])


def clean_value(text: str) -> str | None:
    cleaned = text.strip()
    return None if cleaned in ("", "-") else cleaned


def coerce_cell(text: str, key: str) -> int | str | None:
    """Convert a table cell to an int where that is lossless.

    Codes with a leading zero (``"026000"``) and the ``npsn`` column stay
    strings; empty cells become None.
    """
    if text == "":
        return None
    if key in _PLAIN_STRING_KEYS or not _INTEGER.fullmatch(text):
        return text
    if text.startswith("0") and len(text) > 1:
        return text
    return int(text)


def strip_list_number(text: str) -> str:
    """``"1. Fiber Optic"`` -> ``"Fiber Optic"``."""
    return _LIST_NUMBER.sub("", text).strip()


def absolute_links(href: str, base_url: str, api_base: str) -> tuple[str | None, str | None]:
    """Return ``(_ref, _link)`` for an anchor href.

    ``_ref`` points at the upstream page and ``_link`` at the same path on
    this API. Fragment and ``javascript:`` links yield ``(None, None)``.
    """
    if not href or href.startswith("#") or href.startswith("javascript"):
        return None, None
    if href.startswith("http"):
        return href, href.replace(base_url, api_base)
    return f"{base_url}{href}", f"{api_base}{href}"
