# === FILE: site_mirror/parser/css_parser.py ===
"""Stylesheet processing for SiteMirror.

:class:`StylesheetProcessor` fetches a stylesheet, downloads the fonts its
``@font-face`` rules reference and follows ``@import`` statements while the
depth budget lasts. The result is a :class:`StylesheetNode` tree that
:func:`flatten` turns into the list of files written under ``css/``.

Rewriting is plain text substitution on the stylesheet source:

* a font source becomes ``../font/<name>`` (stylesheets live in ``css/``);
* an expanded ``@import ...;`` statement becomes the bare file name of the
  imported stylesheet.

Anything that cannot be resolved or fetched is left as it was.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Final, List, Optional
from urllib.parse import urlsplit

from site_mirror.crawler.fetcher import Fetcher, FetchError
from site_mirror.crawler.models import BinaryAsset, StylesheetNode
from site_mirror.logger import logger
from site_mirror.utils import (
    ResolutionError,
    local_name,
    resolve_url,
    same_origin,
    strip_query,
    strip_quotes,
)

__all__: Sequence[str] = (
    "FONT_FACE_RE",
    "CSS_URL_RE",
    "CSS_IMPORT_RE",
    "StylesheetProcessor",
    "flatten",
)

FONT_FACE_RE: Final[re.Pattern[str]] = re.compile(r"@font-face\s*\{([^}]+)\}")
CSS_URL_RE: Final[re.Pattern[str]] = re.compile(r"url\(([^)]+)\)")
CSS_IMPORT_RE: Final[re.Pattern[str]] = re.compile(
    r"""@import\s+
        (?:url\s*\(\s*(?:"([^"]+)"|'([^']+)'|([^"'\s)]+))\s*\)   # url("a") url('a') url(a)
          |"([^"]+)"|'([^']+)')                                  # "a" 'a'
        \s*;""",
    re.IGNORECASE | re.VERBOSE,
)

FONT_PREFIX: Final[str] = "../font/"


class StylesheetProcessor:
    """Resolves a stylesheet and, recursively, the stylesheets it imports."""

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher

    async def resolve(self, url: str, depth: int) -> Optional[StylesheetNode]:
        """Fetch *url* and build its node; ``None`` when the stylesheet itself is unavailable.

        ``depth`` is the remaining ``@import`` budget: ``0`` fetches this
        stylesheet and its fonts without expanding any import.
        """
        name = local_name(url)
        if name is None:
            logger.debug("Stylesheet %s has no file name, skipped", url)
            return None
        try:
            css = await self.fetcher.fetch_text(url)
        except FetchError as exc:
            logger.warning("Stylesheet %s skipped: %s", url, exc.reason)
            return None
        logger.info("Css: %s", url)

        css, fonts = await self._collect_fonts(url, css)

        children: List[StylesheetNode] = []
        if depth > 0:
            css, children = await self._expand_imports(url, css, depth)

        return StylesheetNode(name=name, content=css, fonts=tuple(fonts), children=tuple(children))

    async def _collect_fonts(self, url: str, css: str) -> tuple[str, List[BinaryAsset]]:
        fonts: List[BinaryAsset] = []
        for block in FONT_FACE_RE.finditer(css):
            for src_match in CSS_URL_RE.finditer(block.group(0)):
                source = strip_quotes(src_match.group(1).strip())
                try:
                    absolute = resolve_url(url, strip_query(source))
                except ResolutionError as exc:
                    logger.debug("Font skipped: %s", exc)
                    continue
                name = local_name(absolute)
                if name is None:
                    continue
                try:
                    content = await self.fetcher.fetch_bytes(absolute)
                except FetchError as exc:
                    logger.warning("Font %s skipped: %s", absolute, exc.reason)
                    continue
                logger.info("Font: %s", absolute)
                css = css.replace(source, FONT_PREFIX + name)
                fonts.append(BinaryAsset(name=name, content=content))
        return css, fonts

    async def _expand_imports(
        self, url: str, css: str, depth: int
    ) -> tuple[str, List[StylesheetNode]]:
        children: List[StylesheetNode] = []
        own_path = urlsplit(url).path
        for match in CSS_IMPORT_RE.finditer(css):
            target = next(group for group in match.groups() if group)
            try:
                absolute = resolve_url(url, target)
            except ResolutionError as exc:
                logger.debug("Import skipped: %s", exc)
                continue
            name = local_name(absolute)
            if name is None:
                continue
            if not same_origin(url, absolute):
                logger.debug("Import %s is off-origin, left as is", absolute)
                continue
            if urlsplit(absolute).path == own_path:
                logger.debug("Import %s points at itself, left as is", absolute)
                continue
            child = await self.resolve(absolute, depth - 1)
            if child is None:
                continue
            css = css.replace(match.group(0), name)
            children.append(child)
        return css, children


def flatten(node: StylesheetNode) -> List[StylesheetNode]:
    """Pre-order linearisation: the node, then each child's subtree in order."""
    nodes = [node]
    for child in node.children:
        nodes.extend(flatten(child))
    return nodes
