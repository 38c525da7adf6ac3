# File: tests/test_cli.py
"""Тесты для CLI (`site_mirror.cli`) с использованием click.testing.CliRunner.
Проверяют команды `mirror`, `config`, `--version`, а также обработку ошибок.
"""
import json

import pytest
import site_mirror.engine as engine_module
from click.testing import CliRunner
from site_mirror.cli import cli
from site_mirror.crawler.fetcher import FetchError
from site_mirror.crawler.models import BinaryAsset, PageResult, TextAsset
from site_mirror.logger import configure


@pytest.fixture(autouse=True)
def patch_start_mirror(monkeypatch):
    """Патчим start_mirror, чтобы не ходить в сеть."""
    calls = []
    result = PageResult(
        content='<link rel="stylesheet" href="css/s.css">',
        stylesheets=(TextAsset("s.css", "body{}"),),
        images=(BinaryAsset("a.png", b"png"),),
    )

    async def fake_mirror(url, cfg):
        calls.append((url, cfg))
        return result

    monkeypatch.setattr(engine_module, "start_mirror", fake_mirror)
    return calls


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Без configs/default.yaml в рабочем каталоге действуют значения по умолчанию."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def restore_logging():
    """CliRunner подменяет stdout; после теста возвращаем обработчик на настоящий поток."""
    yield
    configure()


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteMirror" in result.output


def test_show_config_defaults():
    runner = CliRunner()
    result = runner.invoke(cli, ["config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["depth"] == 5
    assert data["output_dir"] == "output"


def test_show_config_from_file(tmp_path):
    cfg_file = tmp_path / "mirror.yaml"
    cfg_file.write_text("depth: 2\ntimeout: 3.5\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["depth"] == 2
    assert data["timeout"] == 3.5


def test_bad_config_exits_with_1(tmp_path):
    cfg_file = tmp_path / "mirror.yaml"
    cfg_file.write_text("depth: -3\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_mirror_writes_output(tmp_path, patch_start_mirror):
    runner = CliRunner()
    result = runner.invoke(cli, ["mirror", "http://example.com/", str(tmp_path / "site"), "2"])
    assert result.exit_code == 0, result.output

    url, cfg = patch_start_mirror[0]
    assert url == "http://example.com/"
    assert cfg.depth == 2
    assert (tmp_path / "site" / "index.html").exists()
    assert (tmp_path / "site" / "css" / "s.css").read_text(encoding="utf-8") == "body{}"
    assert (tmp_path / "site" / "img" / "a.png").read_bytes() == b"png"


def test_mirror_uses_defaults(tmp_path, patch_start_mirror):
    runner = CliRunner()
    result = runner.invoke(cli, ["mirror", "http://example.com/"])
    assert result.exit_code == 0, result.output
    assert patch_start_mirror[0][1].depth == 5
    assert (tmp_path / "output" / "index.html").exists()


def test_mirror_report(tmp_path):
    out = tmp_path / "mirror.json"
    runner = CliRunner()
    result = runner.invoke(
        cli, ["mirror", "http://example.com/", str(tmp_path / "site"), "--report", str(out)]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["url"] == "http://example.com/"
    assert data["css"] == [{"name": "s.css", "size": 6}]


def test_mirror_without_url():
    runner = CliRunner()
    result = runner.invoke(cli, ["mirror"])
    assert result.exit_code == 1
    assert "Не указан URL" in result.output


def test_mirror_fatal_fetch(monkeypatch, tmp_path):
    async def failing(url, cfg):
        raise FetchError(url, "HTTP 404")

    monkeypatch.setattr(engine_module, "start_mirror", failing)

    runner = CliRunner()
    result = runner.invoke(cli, ["mirror", "http://example.com/missing", str(tmp_path / "site")])
    assert result.exit_code == 1
    assert "HTTP 404" in result.output
    assert not (tmp_path / "site").exists()


def test_mirror_write_failure(tmp_path):
    blocker = tmp_path / "file.txt"
    blocker.write_text("x", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["mirror", "http://example.com/", str(blocker / "site")])
    assert result.exit_code == 1
    assert "Ошибка при сохранении зеркала" in result.output
