# File: site_mirror/utils.py
"""site_mirror.utils: разрешение и классификация URL, найденных в разметке и стилях."""

from __future__ import annotations

from enum import Enum
from typing import Final, Optional, Sequence
from urllib.parse import urljoin, urlsplit

from site_mirror.logger import logger

__all__: Sequence[str] = (
    "AssetKind",
    "ResolutionError",
    "IMAGE_EXTENSIONS",
    "FONT_EXTENSIONS",
    "resolve_url",
    "local_name",
    "same_origin",
    "extension",
    "classify_extension",
    "strip_quotes",
    "strip_query",
    "origin_root",
)

IMAGE_EXTENSIONS: Final[frozenset[str]] = frozenset({"png", "jpg", "jpeg", "webp", "gif", "svg"})
FONT_EXTENSIONS: Final[frozenset[str]] = frozenset({"ttf", "eot", "woff", "woff2"})

_DEFAULT_PORTS: Final[dict[str, int]] = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


class AssetKind(str, Enum):
    """Класс ресурса по расширению имени файла."""

    IMAGE = "image"
    FONT = "font"
    OTHER = "other"


class ResolutionError(ValueError):
    """Ссылку не удалось разрешить относительно базового URL."""

    def __init__(self, base: str, reference: str, reason: str) -> None:
        super().__init__(f"cannot resolve {reference!r} against {base}: {reason}")
        self.base = base
        self.reference = reference


def resolve_url(base: str, reference: str) -> str:
    """Разрешает ссылку (относительную, protocol-relative или абсолютную) относительно base."""
    try:
        joined = urljoin(base, reference.strip())
        # .port validates the authority and raises on garbage like ":abc"
        urlsplit(joined).port
    except ValueError as exc:
        raise ResolutionError(base, reference, str(exc)) from exc
    logger.debug("Resolved %s -> %s", reference, joined)
    return joined


def local_name(url: str) -> Optional[str]:
    """Возвращает последний сегмент пути (локальное имя файла) или None, если он пуст."""
    segment = url.rsplit("/", 1)[-1]
    return segment or None


def same_origin(base: str, url: str) -> bool:
    """Проверяет совпадение хоста. Схема и порт не сравниваются.

    Хосты сравниваются в виде `urlsplit(...).hostname`, то есть в нижнем регистре:
    `Example.COM` и `example.com` считаются одним источником.
    """
    host = urlsplit(url).hostname
    return host is not None and host == urlsplit(base).hostname


def extension(name: str) -> Optional[str]:
    """Подстрока после последней точки или None, если точки нет."""
    if "." not in name:
        return None
    return name.rsplit(".", 1)[-1]


def classify_extension(name: str) -> AssetKind:
    """Относит имя файла к картинкам, шрифтам или прочему. Регистр учитывается."""
    ext = extension(name)
    if ext in IMAGE_EXTENSIONS:
        return AssetKind.IMAGE
    if ext in FONT_EXTENSIONS:
        return AssetKind.FONT
    return AssetKind.OTHER


def strip_quotes(value: str) -> str:
    """Снимает одну пару одинаковых кавычек вокруг значения url(...)."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def strip_query(value: str) -> str:
    """Отбрасывает ?query и #fragment."""
    return value.split("?", 1)[0].split("#", 1)[0]


def origin_root(url: str) -> str:
    """Корень источника `<scheme>://<host>:<port>` с портом по умолчанию для схемы."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    port = parts.port or _DEFAULT_PORTS.get(parts.scheme)
    if port is None:
        return f"{parts.scheme}://{host}"
    return f"{parts.scheme}://{host}:{port}"
