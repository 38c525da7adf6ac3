# site_mirror/crawler/__init__.py
"""site_mirror.crawler: HTTP-доступ и модели собранных ресурсов."""

from .fetcher import Fetcher, FetchError
from .models import BinaryAsset, PageResult, StylesheetNode, TextAsset

__all__ = ["Fetcher", "FetchError", "BinaryAsset", "PageResult", "StylesheetNode", "TextAsset"]
