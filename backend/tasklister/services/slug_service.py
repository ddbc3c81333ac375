# Overview: Slug derivation and collision handling for instance addresses.

from __future__ import annotations

import re
from typing import Callable

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def generate_slug(name: str) -> str:
    """
    Derive a URL-safe identifier from a display name.

    Lowercases and trims, collapses every run of characters outside
    ``[a-z0-9]`` into one hyphen, then strips hyphens from both ends.
    "  Acme Corp!! " -> "acme-corp".
    """
    slug = _NON_SLUG_CHARS.sub("-", name.lower().strip())
    return slug.strip("-")


def allocate_slug(name: str, is_taken: Callable[[str], bool]) -> str:
    """
    Return the first unused slug for ``name``.

    Tries the base slug, then ``<base>-1``, ``<base>-2``, ... Each candidate
    is built from the base, never from the previous candidate.
    """
    base = generate_slug(name)
    candidate = base
    counter = 1
    while is_taken(candidate):
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate
