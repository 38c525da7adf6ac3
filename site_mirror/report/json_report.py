# site_mirror/report/json_report.py

"""
Генерация JSON-отчёта о зеркале для проекта SiteMirror.

Отчёт перечисляет сохранённые файлы по каталогам (с размерами) и ссылки,
переписанные на локальные пути.
"""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from site_mirror.crawler.models import BinaryAsset, PageResult, TextAsset


def _files(assets: Iterable[Union[TextAsset, BinaryAsset]]) -> list[Dict[str, Any]]:
    out = []
    for asset in assets:
        size = len(asset.content) if isinstance(asset.content, bytes) else len(asset.content.encode("utf-8"))
        out.append({"name": asset.name, "size": size})
    return out


def _icon(icon: Optional[BinaryAsset]) -> Optional[Dict[str, Any]]:
    return None if icon is None else {"name": icon.name, "size": len(icon.content)}


def build_summary(result: PageResult, url: str) -> Dict[str, Any]:
    """Собирает сериализуемую сводку по результату зеркалирования."""
    return {
        "url": url,
        "icon": _icon(result.icon),
        "shortcut_icon": _icon(result.shortcut_icon),
        "css": _files(result.stylesheets),
        "src": _files(result.scripts),
        "img": _files(result.images),
        "font": _files(result.fonts),
        "anchors": [{"url": absolute, "name": name} for absolute, name in result.anchors],
    }


def render_json(summary: Dict[str, Any], output_path: Union[Path, str]) -> Path:
    """
    Сохраняет сводку summary в формате JSON по указанному пути.

    :param summary: результат build_summary
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_mirror.report.json_report import build_summary, render_json
    report_path = render_json(build_summary(result, url), 'reports/mirror.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    # Запись в файл с отступами и Unicode
    with output.open('w', encoding='utf-8') as f:
        json.dump(summary, f, ensure_ascii=False, indent=2)

    return output
