# site_mirror/crawler/models.py
"""
Data models for a mirrored page and the assets collected along the way.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(slots=True, frozen=True)
class TextAsset:
    """A stylesheet or script: local file name plus decoded text."""

    name: str
    content: str


@dataclass(slots=True, frozen=True)
class BinaryAsset:
    """An image, font or icon. The payload is never decoded."""

    name: str
    content: bytes


@dataclass(slots=True, frozen=True)
class StylesheetNode:
    """One fetched stylesheet with its fonts and the stylesheets it imports."""

    name: str
    content: str
    fonts: Tuple[BinaryAsset, ...] = ()
    children: Tuple[StylesheetNode, ...] = ()


@dataclass(slots=True, frozen=True)
class PageResult:
    """Rewritten page text and every asset collected while rewriting it."""

    content: str
    icon: Optional[BinaryAsset] = None
    shortcut_icon: Optional[BinaryAsset] = None
    stylesheets: Tuple[TextAsset, ...] = ()
    scripts: Tuple[TextAsset, ...] = ()
    images: Tuple[BinaryAsset, ...] = ()
    fonts: Tuple[BinaryAsset, ...] = ()
    # (absolute url, local name)
    anchors: Tuple[Tuple[str, str], ...] = ()
