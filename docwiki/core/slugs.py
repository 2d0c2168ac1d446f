"""Slug and title derivation from file names."""

from __future__ import annotations

import re
import unicodedata

ARTICLE_SUFFIX = ".md"


def strip_diacritics(text: str) -> str:
    """Decompose (NFKD) and drop combining marks: "Árbol" -> "Arbol"."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def is_article_name(name: str) -> bool:
    return name.lower().endswith(ARTICLE_SUFFIX)


def strip_article_suffix(name: str) -> str:
    if is_article_name(name):
        return name[: -len(ARTICLE_SUFFIX)]
    return name


def slugify(text: str) -> str:
    """Convert a file name stem into a URL-safe slug.

    Examples:
        >>> slugify("Getting Started")
        'getting-started'
        >>> slugify("Café  à -- Paris.")
        'cafe-a-paris'
        >>> slugify("¿Qué?")
        'que'
    """
    if not text:
        return ""
    slug = strip_diacritics(text).lower()
    slug = re.sub(r"[^a-z0-9 -]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-").rstrip(".")
    return slug


def prettify(text: str) -> str:
    """Turn a file name stem into a display title.

    Dash and underscore runs become spaces and each word gets an uppercase
    first character; the rest of each word is left as is.

        >>> prettify("getting-started")
        'Getting Started'
    """
    title = re.sub(r"[-_]+", " ", text).strip()
    return re.sub(r"(^|\s)(\S)", lambda m: m.group(1) + m.group(2).upper(), title)
