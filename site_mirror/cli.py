# === FILE: site_mirror/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SiteMirror через командную строку.

Команды:
  mirror    Зеркалировать страницу в локальный каталог
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования (e.g. "%(asctime)s %(levelname)s %(message)s")

Команда mirror:
  URL                 Адрес страницы-шаблона
  OUTPUT_DIR          Каталог для зеркала (default: output)
  DEPTH               Глубина раскрытия @import (default: 5)
  --report PATH       Сохранить JSON-сводку о зеркале

Дополнительно:
  --version, -v       Показать версию SiteMirror

Пример:
  site-mirror mirror https://example.com/ site 2 --report site.json
"""
import sys
from pathlib import Path

import click

from site_mirror import __version__
from site_mirror.config import load_config
from site_mirror.crawler.fetcher import FetchError
from site_mirror.engine import Engine, PersistError
from site_mirror.logger import configure
from site_mirror.report.json_report import build_summary, render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteMirror, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SiteMirror CLI."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('mirror', context_settings=CONTEXT_SETTINGS)
@click.argument('url', required=False)
@click.argument('output_dir', required=False, type=click.Path(file_okay=False, path_type=Path))
@click.argument('depth', required=False, type=click.IntRange(min=0))
@click.option(
    '--report', '-r', 'report_path',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-сводку о зеркале'
)
@click.pass_context
def mirror(ctx, url, output_dir, depth, report_path):
    """Зеркалировать страницу URL в каталог OUTPUT_DIR."""
    cfg = ctx.obj['config']
    if not url:
        print_error('Не указан URL страницы')
    if depth is not None:
        cfg = cfg.model_copy(update={'depth': depth})
    target = output_dir if output_dir is not None else Path(cfg.output_dir)

    click.echo(f'Mirroring {url} -> {target} (depth {cfg.depth})')
    try:
        result = Engine(cfg).run(url, target)
    except FetchError as e:
        print_error(f'Не удалось загрузить страницу: {e}')
    except PersistError as e:
        print_error(f'Ошибка при сохранении зеркала: {e}')
    except Exception as e:
        print_error(f'Ошибка при зеркалировании: {e}')
    click.echo(f'Mirror: {target}')

    if report_path:
        try:
            saved_json = render_json(build_summary(result, url), report_path)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
