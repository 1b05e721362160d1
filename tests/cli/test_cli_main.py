from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from newkit import __version__
from newkit.cli import main as cli_main
from newkit.errors import TransportError
from newkit.settings import RuntimeSettings

SOURCE_URL = "https://api.github.com/orgs/NetCoreTemplates/repos"
RELEASES = "https://api.github.com/repos/NetCoreTemplates/web/releases"
ZIPBALL = "https://api.github.com/repos/NetCoreTemplates/web/zipball/v1"


@pytest.fixture()
def cli_settings(runtime_settings: RuntimeSettings, monkeypatch: pytest.MonkeyPatch) -> RuntimeSettings:
    monkeypatch.setattr(cli_main, "SETTINGS", runtime_settings, raising=False)
    return runtime_settings


@pytest.fixture()
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    project_dir = tmp_path / "workspace"
    project_dir.mkdir()
    (project_dir / "newkit.config").write_text(
        json.dumps({"sources": [{"name": "Core Templates", "url": SOURCE_URL}]}),
        encoding="utf-8",
    )
    monkeypatch.chdir(project_dir)
    return project_dir


def _install_http(monkeypatch: pytest.MonkeyPatch, http) -> None:
    monkeypatch.setattr(cli_main, "RequestsHttpClient", lambda *args, **kwargs: http)


def test_list_templates(cli_settings, workdir, fake_http, monkeypatch, capsys) -> None:
    http = fake_http({SOURCE_URL: [{"name": "web", "description": "Web App"}, {"name": "vue-spa"}]})
    _install_http(monkeypatch, http)

    exit_code = cli_main.main([])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.startswith("Help: newkit -h\n")
    assert "Core Templates\n  1  web      Web App\n  2  vue-spa\n" in out
    assert out.rstrip().endswith(cli_main.USAGE_LINE)


def test_create_project(cli_settings, workdir, fake_http, zip_bytes, monkeypatch) -> None:
    http = fake_http(
        {
            SOURCE_URL: [{"name": "web", "releases_url": RELEASES + "{/id}"}],
            RELEASES: [{"name": "v1", "zipball_url": ZIPBALL}],
        },
        {ZIPBALL: zip_bytes({"web-v1/": None, "web-v1/MyApp.csproj": "<RootNamespace>MyApp</RootNamespace>"})},
    )
    _install_http(monkeypatch, http)

    exit_code = cli_main.main(["web", "Acme"])

    assert exit_code == 0
    assert (workdir / "Acme" / "Acme.csproj").read_text(encoding="utf-8") == "<RootNamespace>Acme</RootNamespace>"
    assert any(path.is_file() for path in cli_settings.cache_dir.iterdir())


def test_clean_clears_cache(cli_settings, capsys) -> None:
    cli_settings.cache_dir.mkdir(parents=True)
    (cli_settings.cache_dir / "entry").write_bytes(b"zip")

    exit_code = cli_main.main(["--clean"])

    assert exit_code == 0
    assert not cli_settings.cache_dir.exists()
    assert capsys.readouterr().out.strip() == f"Cleared package cache: {cli_settings.cache_dir}"


def test_unknown_template_exits_with_error(cli_settings, workdir, fake_http, monkeypatch, capsys) -> None:
    _install_http(monkeypatch, fake_http({SOURCE_URL: []}))

    exit_code = cli_main.main(["missing", "Acme"])

    assert exit_code == 1
    assert "Could not find template 'missing'" in capsys.readouterr().err
    assert not (workdir / "Acme").exists()


def test_illegal_project_name(cli_settings, workdir, fake_http, monkeypatch, capsys) -> None:
    http = fake_http()
    _install_http(monkeypatch, http)

    exit_code = cli_main.main(["web", "my-app"])

    assert exit_code == 1
    assert "Illegal char in project name: my-app" in capsys.readouterr().err
    assert http.calls == []


def test_transport_error_payload_shown_in_debug(cli_settings, workdir, fake_http, monkeypatch, capsys) -> None:
    failure = TransportError(f"ERROR: Could not parse JSON response from: {SOURCE_URL}", url=SOURCE_URL, payload="<html>")
    _install_http(monkeypatch, fake_http({SOURCE_URL: failure}))

    exit_code = cli_main.main(["--debug", "web", "Acme"])

    err = capsys.readouterr().err
    assert exit_code == 1
    assert "Invalid JSON: <html>" in err
    assert "Could not parse JSON response" in err


def test_missing_explicit_config(cli_settings, tmp_path: Path, capsys) -> None:
    exit_code = cli_main.main(["-c", str(tmp_path / "nope.config"), "web"])

    assert exit_code == 1
    assert "Config file not found" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [["/x"], ["123"]])
def test_rejected_template_arguments(argv: list[str], cli_settings, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(argv)

    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert "Unknown switch" in err or "Please specify a template name." in err


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_main.main(["--version"])

    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip() == f"newkit {__version__}"


def test_help_mentions_opt_out(capsys) -> None:
    with pytest.raises(SystemExit):
        cli_main.main(["--help"])

    out = capsys.readouterr().out
    assert "newkit [TemplateName@Version] [ProjectName]" in out
    assert "NEWKIT_TELEMETRY_OPTOUT=1" in out


def test_clean_failure_is_reported(runtime_settings, monkeypatch, capsys) -> None:
    blocked = dataclasses.replace(runtime_settings, cache_dir=runtime_settings.home_dir / "cache-file")
    blocked.cache_dir.write_text("not a directory", encoding="utf-8")
    monkeypatch.setattr(cli_main, "SETTINGS", blocked, raising=False)

    exit_code = cli_main.main(["--clean"])

    assert exit_code == 1
    assert "Could not clear cache" in capsys.readouterr().err


def test_unwritable_cache_is_reported(runtime_settings, workdir, fake_http, zip_bytes, monkeypatch, capsys) -> None:
    blocked = dataclasses.replace(runtime_settings, cache_dir=runtime_settings.home_dir / "cache-file")
    blocked.cache_dir.write_text("not a directory", encoding="utf-8")
    monkeypatch.setattr(cli_main, "SETTINGS", blocked, raising=False)
    _install_http(monkeypatch, fake_http({}, {"https://example.org/app.zip": zip_bytes({"MyApp.txt": "MyApp"})}))

    exit_code = cli_main.main(["https://example.org/app.zip", "Acme"])

    assert exit_code == 1
    assert "Could not write cache entry" in capsys.readouterr().err
