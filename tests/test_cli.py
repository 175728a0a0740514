import sqlite3

import pytest

from adminkit.cli import load_settings, main, tip
from adminkit.config import VERSION
from adminkit.migration import INITIAL_VERSION


def _settings(tmp_path, text):
    path = tmp_path / "settings.yml"
    path.write_text(text, encoding="utf-8")
    return path


SQLITE_SETTINGS = """
settings:
  application:
    name: demo
    port: 8000
  database:
    driver: sqlite3
    source: admin.db
"""


def test_version_command_prints_version(capsys):
    assert main(["version"]) == 0
    assert capsys.readouterr().out.strip() == VERSION


def test_no_arguments_fails_with_tip(capsys):
    assert main([]) == 255
    captured = capsys.readouterr()
    assert VERSION in captured.out
    assert "requires at least one arg" in captured.err


def test_unknown_command_fails():
    assert main(["nonsense"]) == 255


def test_tip_mentions_version(capsys):
    tip()
    assert VERSION in capsys.readouterr().out


def test_load_settings_returns_settings_section(tmp_path):
    path = _settings(tmp_path, SQLITE_SETTINGS)
    settings = load_settings(str(path))
    assert settings["application"] == {"name": "demo", "port": 8000}
    assert settings["database"]["driver"] == "sqlite3"


def test_load_settings_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "missing.yml"))
    path = _settings(tmp_path, "- a\n- b\n")
    with pytest.raises(ValueError):
        load_settings(str(path))


def test_config_command_prints_sections(tmp_path, capsys):
    path = _settings(tmp_path, SQLITE_SETTINGS)
    assert main(["config", "-c", str(path)]) == 0
    out = capsys.readouterr().out
    assert "application:" in out
    assert '"port": 8000' in out
    assert '"source": "admin.db"' in out


def test_config_command_missing_file(tmp_path):
    assert main(["config", "-c", str(tmp_path / "missing.yml")]) == 255


def test_migrate_command_creates_database(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = _settings(tmp_path, SQLITE_SETTINGS)
    assert main(["migrate", "-c", str(path)]) == 0
    conn = sqlite3.connect(tmp_path / "admin.db")
    try:
        rows = conn.execute("SELECT version FROM sys_migration").fetchall()
    finally:
        conn.close()
    assert rows == [(str(INITIAL_VERSION),)]
    assert main(["migrate", "-c", str(path)]) == 0


def test_migrate_command_rejects_unsupported_driver(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = _settings(
        tmp_path, "settings:\n  database:\n    driver: mysql\n    source: x\n"
    )
    assert main(["migrate", "-c", str(path)]) == 255
    assert not (tmp_path / "x").exists()


def test_migrate_command_unknown_host(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = _settings(tmp_path, SQLITE_SETTINGS)
    assert main(["migrate", "-c", str(path), "-d", "other.example.com"]) == 255


@pytest.mark.parametrize("flags, package", [([], "version_local"), (["-a"], "version")])
def test_migrate_generate_renders_template(tmp_path, monkeypatch, flags, package):
    monkeypatch.chdir(tmp_path)
    template = tmp_path / "template" / "migrate.template"
    template.parent.mkdir()
    template.write_text("package {{.Package}} // {{.GenerateTime}}\n", encoding="utf-8")
    assert main(["migrate", "-g", *flags]) == 0
    created = list((tmp_path / "migration" / package).glob("*_migrate.py"))
    assert len(created) == 1
    stamp = created[0].name.split("_")[0]
    assert created[0].read_text(encoding="utf-8") == f"package {package} // {stamp}\n"