from __future__ import annotations

from pathlib import Path

import pytest

from linguci import cli
from linguci.catalogs import read_catalog

SOURCE_PO = """\
msgid ""
msgstr ""
"Content-Type: text/plain; charset=UTF-8\\n"

msgid "Save"
msgstr "Save"

msgid "Cancel"
msgstr "Cancel"
"""

TARGET_PO = """\
msgid ""
msgstr ""
"Content-Type: text/plain; charset=UTF-8\\n"
"""


def make_workspace(tmp_path: Path) -> Path:
    (tmp_path / "po").mkdir()
    (tmp_path / "po" / "en-US.po").write_text(SOURCE_PO, encoding="utf-8")
    (tmp_path / "po" / "it-IT.po").write_text(TARGET_PO, encoding="utf-8")
    (tmp_path / "linguci.yml").write_text(
        "locales: [en-US, it-IT]\n"
        "files:\n"
        "  - source: po/en-US.po\n"
        "    translation: po/%locale%.po\n"
        "llm:\n"
        "  provider: openai\n",
        encoding="utf-8",
    )
    return tmp_path


def test_main_dry_run_plans_without_writing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    workspace = make_workspace(tmp_path)

    exit_code = cli.main([str(workspace), "--dry-run", "--batch-size", "1"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Dry run: 2 translation tasks planned." in output
    assert "Italian" in output
    assert (workspace / "po" / "it-IT.po").read_text(encoding="utf-8") == TARGET_PO


def test_main_runs_with_echo_provider(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    workspace = make_workspace(tmp_path)

    exit_code = cli.main([str(workspace), "--provider", "echo", "--no-backup", "--retry-delay", "0"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Translation complete." in output
    assert "1 successful / 1 total" in output
    catalog = read_catalog(workspace / "po" / "it-IT.po")
    assert catalog.get("", "Save").translated_forms == ["Save"]
    assert catalog.get("", "Cancel").translated_forms == ["Cancel"]
    assert not (workspace / "po" / "it-IT.po.bak").exists()


def test_main_reports_missing_openai_key(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    workspace = make_workspace(tmp_path)

    exit_code = cli.main([str(workspace)])

    assert exit_code == 1
    assert "OPENAI_API_KEY" in capsys.readouterr().out


def test_main_reports_missing_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = cli.main([str(tmp_path)])

    assert exit_code == 1
    assert "linguci.yml" in capsys.readouterr().out


def test_main_reports_missing_translation_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    workspace = make_workspace(tmp_path)
    (workspace / "po" / "it-IT.po").unlink()

    exit_code = cli.main([str(workspace), "--provider", "echo"])

    assert exit_code == 1
    assert "Translation file does not exist" in capsys.readouterr().out


def test_provider_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    workspace = make_workspace(tmp_path)
    monkeypatch.setenv("LLM_PROVIDER", "echo")

    exit_code = cli.main([str(workspace), "--retry-delay", "0"])

    assert exit_code == 0
    assert "Provider:        echo" in capsys.readouterr().out
