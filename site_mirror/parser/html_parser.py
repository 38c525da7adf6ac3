# === FILE: site_mirror/parser/html_parser.py ===
"""HTML page extraction for SiteMirror.

:class:`PageExtractor` fetches one page, queries it with BeautifulSoup CSS
selectors and runs a fixed sequence of passes over it:

1. icon (``link[rel=icon]`` → ``favicon.ico`` next to the page → origin root);
2. shortcut icon (``link[rel="shortcut icon"]``, no fallback);
3. stylesheets (delegated to :class:`~site_mirror.parser.css_parser.StylesheetProcessor`);
4. scripts, 5. images, 6. anchors;
7. ``url(...)`` references inside ``style`` attributes.

Every pass rewrites the *page text*, not the parsed tree: the matched
attribute value is replaced with its local path wherever it occurs in the
document. The soup is only used to find references.

Only the page fetch itself is fatal (:class:`~site_mirror.crawler.fetcher.FetchError`
propagates). Every other failure skips one resource and the pass moves on.
"""
from __future__ import annotations

from collections.abc import Sequence
from html import escape
from typing import List, Optional, Set, Tuple, Union

from bs4 import BeautifulSoup

from site_mirror.crawler.fetcher import Fetcher, FetchError
from site_mirror.crawler.models import BinaryAsset, PageResult, TextAsset
from site_mirror.logger import logger
from site_mirror.parser.css_parser import CSS_URL_RE, StylesheetProcessor, flatten
from site_mirror.utils import (
    AssetKind,
    ResolutionError,
    classify_extension,
    extension,
    local_name,
    origin_root,
    resolve_url,
    same_origin,
    strip_quotes,
)

__all__: Sequence[str] = ("PageExtractor",)

Asset = Union[TextAsset, BinaryAsset]

FAVICON_NAME = "favicon.ico"


class _PageText:
    """Running page text plus the literals already substituted in it."""

    def __init__(self, url: str, text: str) -> None:
        self.url = url
        self.text = text
        self._rewritten: Set[str] = set()

    def rewrite(self, literal: str, replacement: str) -> bool:
        """Replace every occurrence of *literal*; False when nothing was replaced."""
        # A second pass over the same literal would also hit the path it was
        # rewritten to ("a.png" inside "img/a.png").
        if not literal or literal in self._rewritten:
            return False
        # bs4 hands out decoded attribute values, the raw text may still hold "&amp;"
        for raw, new in (
            (literal, replacement),
            (escape(literal, quote=False), escape(replacement, quote=False)),
        ):
            if raw in self.text:
                self._rewritten.add(literal)
                self.text = self.text.replace(raw, new)
                return True
        logger.debug("%s not found in page text, left as is", literal)
        return False


class PageExtractor:
    """Builds a :class:`PageResult` for one page URL."""

    def __init__(self, fetcher: Fetcher, stylesheets: Optional[StylesheetProcessor] = None) -> None:
        self.fetcher = fetcher
        self.stylesheets = stylesheets or StylesheetProcessor(fetcher)

    async def extract(self, url: str, depth: int) -> PageResult:
        """Fetch *url*, mirror what it references and return the rewritten page.

        Raises :class:`FetchError` when the page itself cannot be fetched.
        """
        html = await self.fetcher.fetch_text(url)
        logger.info("Html: %s", url)
        soup = BeautifulSoup(html, "html.parser")
        page = _PageText(url, html)

        icon = await self._icon(soup, page)
        shortcut_icon = await self._shortcut_icon(soup, page)

        stylesheets: List[TextAsset] = []
        fonts: List[BinaryAsset] = []
        await self._stylesheet_pass(soup, page, depth, stylesheets, fonts)

        scripts = await self._attribute_pass(
            soup, page, "script[src]", "src", binary=False, prefix="src/", label="Script"
        )
        images = await self._attribute_pass(
            soup, page, "img[src]", "src", binary=True, prefix="img/", label="Image"
        )
        anchors = self._anchor_pass(soup, page)
        await self._inline_style_pass(soup, page, images, fonts)

        return PageResult(
            content=page.text,
            icon=icon,
            shortcut_icon=shortcut_icon,
            stylesheets=tuple(stylesheets),
            scripts=tuple(scripts),  # type: ignore[arg-type]
            images=tuple(images),  # type: ignore[arg-type]
            fonts=tuple(fonts),
            anchors=tuple(anchors),
        )

    # ------------------------------------------------------------------ #
    # Shared steps                                                       #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _locate(base: str, reference: str, *, check_origin: bool = True) -> Optional[Tuple[str, str]]:
        """Resolve *reference* and return ``(absolute_url, local_name)`` or ``None`` to skip it."""
        if not reference:
            return None
        try:
            absolute = resolve_url(base, reference)
        except ResolutionError as exc:
            logger.debug("Skipped: %s", exc)
            return None
        name = local_name(absolute)
        if name is None:
            logger.debug("Skipped %s: no file name", absolute)
            return None
        if check_origin and not same_origin(base, absolute):
            logger.debug("Skipped %s: off-origin", absolute)
            return None
        return absolute, name

    async def _localize(
        self,
        page: _PageText,
        reference: str,
        *,
        binary: bool,
        prefix: str,
        label: str,
        check_origin: bool = True,
    ) -> Optional[Asset]:
        """Resolve, origin-check, fetch and rewrite one attribute value."""
        located = self._locate(page.url, reference, check_origin=check_origin)
        if located is None:
            return None
        absolute, name = located
        try:
            if binary:
                content: Union[str, bytes] = await self.fetcher.fetch_bytes(absolute)
            else:
                content = await self.fetcher.fetch_text(absolute)
        except FetchError as exc:
            logger.warning("%s %s skipped: %s", label, absolute, exc.reason)
            return None
        logger.info("%s: %s", label, absolute)
        page.rewrite(reference, prefix + name)
        if binary:
            return BinaryAsset(name=name, content=content)  # type: ignore[arg-type]
        return TextAsset(name=name, content=content)  # type: ignore[arg-type]

    # ------------------------------------------------------------------ #
    # Passes                                                             #
    # ------------------------------------------------------------------ #

    async def _icon(self, soup: BeautifulSoup, page: _PageText) -> Optional[BinaryAsset]:
        element = soup.select_one("link[rel=icon][href]")
        if element is not None:
            asset = await self._localize(
                page, element.get("href", ""), binary=True, prefix="", label="Icon", check_origin=False
            )
            if asset is not None:
                return asset  # type: ignore[return-value]

        candidates = (
            resolve_url(page.url, FAVICON_NAME),
            f"{origin_root(page.url)}/{FAVICON_NAME}",
        )
        for candidate in candidates:
            try:
                content = await self.fetcher.fetch_bytes(candidate)
            except FetchError as exc:
                logger.debug("Icon %s unavailable: %s", candidate, exc.reason)
                continue
            logger.info("Icon: %s", candidate)
            return BinaryAsset(name=FAVICON_NAME, content=content)
        return None

    async def _shortcut_icon(self, soup: BeautifulSoup, page: _PageText) -> Optional[BinaryAsset]:
        element = soup.select_one('link[rel="shortcut icon"][href]')
        if element is None:
            return None
        return await self._localize(  # type: ignore[return-value]
            page, element.get("href", ""), binary=True, prefix="", label="Shortcut icon", check_origin=False
        )

    async def _stylesheet_pass(
        self,
        soup: BeautifulSoup,
        page: _PageText,
        depth: int,
        stylesheets: List[TextAsset],
        fonts: List[BinaryAsset],
    ) -> None:
        for element in soup.select("link[rel=stylesheet][href]"):
            href = element.get("href", "")
            located = self._locate(page.url, href)
            if located is None:
                continue
            absolute, _ = located
            logger.info("Link: %s", absolute)
            root = await self.stylesheets.resolve(absolute, depth)
            if root is None:
                continue
            page.rewrite(href, f"css/{root.name}")
            for node in flatten(root):
                fonts.extend(node.fonts)
                stylesheets.append(TextAsset(name=node.name, content=node.content))

    async def _attribute_pass(
        self,
        soup: BeautifulSoup,
        page: _PageText,
        selector: str,
        attribute: str,
        *,
        binary: bool,
        prefix: str,
        label: str,
    ) -> List[Asset]:
        assets: List[Asset] = []
        for element in soup.select(selector):
            asset = await self._localize(
                page, element.get(attribute, ""), binary=binary, prefix=prefix, label=label
            )
            if asset is not None:
                assets.append(asset)
        return assets

    def _anchor_pass(self, soup: BeautifulSoup, page: _PageText) -> List[Tuple[str, str]]:
        anchors: List[Tuple[str, str]] = []
        for element in soup.select("a[href]"):
            href = element.get("href", "")
            if href.startswith("#"):
                continue
            located = self._locate(page.url, href)
            if located is None:
                continue
            absolute, name = located
            logger.info("Anchor: %s", absolute)
            page.rewrite(href, f"/{name}")
            anchors.append((absolute, name))
        return anchors

    async def _inline_style_pass(
        self,
        soup: BeautifulSoup,
        page: _PageText,
        images: List[BinaryAsset],
        fonts: List[BinaryAsset],
    ) -> None:
        for element in soup.select("[style]"):
            style = element.get("style", "")
            for match in CSS_URL_RE.finditer(style):
                reference = strip_quotes(match.group(1).strip())
                located = self._locate(page.url, reference)
                if located is None:
                    continue
                absolute, name = located
                if extension(name) is None:
                    logger.debug("Skipped %s: no extension", absolute)
                    continue
                kind = classify_extension(name)
                if kind is AssetKind.OTHER:
                    continue
                try:
                    content = await self.fetcher.fetch_bytes(absolute)
                except FetchError as exc:
                    logger.warning("Inline resource %s skipped: %s", absolute, exc.reason)
                    continue
                if kind is AssetKind.IMAGE:
                    logger.info("Image: %s", absolute)
                    prefix, bucket = "img/", images
                else:
                    logger.info("Font: %s", absolute)
                    prefix, bucket = "fonts/", fonts
                if absolute in page.text:
                    page.rewrite(absolute, prefix + name)
                else:
                    # a relative reference is only rewritten inside its own url(...)
                    token = match.group(0)
                    page.rewrite(token, token.replace(reference, prefix + name, 1))
                bucket.append(BinaryAsset(name=name, content=content))
