# File: site_mirror/engine.py
"""site_mirror.engine: запуск зеркалирования страницы и запись результата на диск."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable, Union

from site_mirror.config import MirrorConfig
from site_mirror.crawler.fetcher import Fetcher
from site_mirror.crawler.models import BinaryAsset, PageResult, TextAsset
from site_mirror.logger import logger
from site_mirror.parser.html_parser import PageExtractor

__all__ = ["Engine", "PersistError", "start_mirror", "save_mirror"]


class PersistError(OSError):
    """Не удалось создать каталог или записать файл зеркала."""


async def start_mirror(url: str, cfg: MirrorConfig) -> PageResult:
    """
    Открывает HTTP-сессию и извлекает страницу с её ресурсами.

    Parameters
    ----------
    url : str
        Адрес зеркалируемой страницы.
    cfg : MirrorConfig
        Конфигурация (глубина @import, таймаут, User-Agent).

    Returns
    -------
    PageResult
        Переписанная страница и собранные ресурсы.
    """
    async with Fetcher(cfg) as fetcher:
        return await PageExtractor(fetcher).extract(url, cfg.depth)


def _write(path: Path, content: Union[str, bytes]) -> None:
    try:
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise PersistError(exc.errno, f"Не удалось записать {path}: {exc.strerror}") from exc
    logger.debug("Written %s", path)


def _mkdir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistError(exc.errno, f"Не удалось создать каталог {path}: {exc.strerror}") from exc
    return path


def _write_bucket(folder: Path, assets: Iterable[Union[TextAsset, BinaryAsset]]) -> None:
    for asset in assets:
        _write(folder / asset.name, asset.content)


def save_mirror(result: PageResult, output_dir: Union[str, Path]) -> Path:
    """Записывает index.html, css/, src/, img/, font/ и иконки в корень output_dir."""
    root = _mkdir(Path(output_dir))
    _write(root / "index.html", result.content)

    _write_bucket(_mkdir(root / "css"), result.stylesheets)
    _write_bucket(_mkdir(root / "src"), result.scripts)
    _write_bucket(_mkdir(root / "img"), result.images)
    _write_bucket(_mkdir(root / "font"), result.fonts)

    for icon in (result.icon, result.shortcut_icon):
        if icon is not None:
            _write(root / icon.name, icon.content)

    logger.info("Mirror saved to %s", root)
    return root


class Engine:
    """Зеркалирование страницы и сохранение результата; через него работает команда `mirror`."""

    def __init__(self, config: MirrorConfig) -> None:
        self.config = config

    def run(self, url: str, output_dir: Union[str, Path, None] = None) -> PageResult:
        """Зеркалирует страницу и сохраняет её; возвращает PageResult."""
        logger.info("Starting mirror of %s", url)
        try:
            result = asyncio.run(start_mirror(url, self.config))
        except Exception as exc:
            logger.error("Mirroring failed: %s", exc)
            raise
        save_mirror(result, output_dir if output_dir is not None else self.config.output_dir)
        return result
