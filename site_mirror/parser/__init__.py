# site_mirror/parser/__init__.py
"""site_mirror.parser: разбор страниц и таблиц стилей."""

from .css_parser import StylesheetProcessor, flatten
from .html_parser import PageExtractor

__all__ = ["StylesheetProcessor", "flatten", "PageExtractor"]
