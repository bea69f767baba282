from __future__ import annotations

from pathlib import Path

import pytest

from linguci.configuration import get_settings, load_project, validate_paths
from linguci.errors import CatalogNotFoundError, ConfigurationError
from linguci.providers import ProviderKind

BASIC_CONFIG = """\
locales:
  - en-US
  - fr-FR
  - de-DE
files:
  - source: locales/en-US.po
    translation: locales/%locale%.po
llm:
  provider: azure-openai
  model: gpt-4o-mini
"""


def write_config(workspace: Path, text: str = BASIC_CONFIG, name: str = "linguci.yml") -> None:
    (workspace / name).write_text(text, encoding="utf-8")


def touch_catalogs(workspace: Path, *locales: str) -> None:
    (workspace / "locales").mkdir(exist_ok=True)
    for locale in locales:
        (workspace / "locales" / f"{locale}.po").write_text('msgid ""\nmsgstr ""\n', encoding="utf-8")


def test_load_project_applies_defaults(tmp_path: Path) -> None:
    write_config(tmp_path)

    project = load_project(tmp_path)

    assert project.base_path == tmp_path
    assert project.locales == ["en-US", "fr-FR", "de-DE"]
    assert project.llm.provider is ProviderKind.AZURE_OPENAI
    assert project.llm.model == "gpt-4o-mini"
    assert project.batch_size == 5
    assert project.language_concurrency == 1
    assert project.max_retries == 3
    assert project.retry_delay == 1.0
    assert project.strict_batches is False
    assert project.task_timeout is None
    assert project.backup is True


def test_load_project_accepts_yaml_extension_and_overrides(tmp_path: Path) -> None:
    write_config(tmp_path, BASIC_CONFIG + "batch_size: 10\n", name="linguci.yaml")

    project = load_project(tmp_path, overrides={"batch_size": None, "max_retries": 0})

    assert project.batch_size == 10
    assert project.max_retries == 0


def test_load_project_resolves_base_path(tmp_path: Path) -> None:
    write_config(tmp_path, BASIC_CONFIG + "base_path: app\n")

    project = load_project(tmp_path)

    assert project.base_path == tmp_path / "app"
    mapping = project.files[0]
    assert project.source_path(mapping) == tmp_path / "app" / "locales" / "en-US.po"
    assert project.translation_path(mapping, "fr-FR") == tmp_path / "app" / "locales" / "fr-FR.po"


def test_load_project_requires_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="linguci.yml"):
        load_project(tmp_path)


@pytest.mark.parametrize(
    "text",
    [
        "locales: []\nfiles:\n  - source: a.po\n    translation: b.po\n",
        "locales: [xx-XX]\nfiles:\n  - source: a.po\n    translation: b.po\n",
        "locales: [fr-FR]\nfiles: []\n",
        "locales: [fr-FR]\nfiles:\n  - source: a.po\n",
        "locales: [fr-FR]\nfiles:\n  - source: a.po\n    translation: b.po\nbatch_size: 0\n",
        "locales: [fr-FR]\nfiles:\n  - source: a.po\n    translation: b.po\nllm:\n  provider: nope\n",
        "- just\n- a list\n",
    ],
)
def test_load_project_rejects_invalid_configs(tmp_path: Path, text: str) -> None:
    write_config(tmp_path, text)

    with pytest.raises(ConfigurationError, match="Configuration validation errors"):
        load_project(tmp_path)


def test_target_locales_exclude_source_locale(tmp_path: Path) -> None:
    write_config(tmp_path)
    project = load_project(tmp_path)

    assert project.target_locales(project.files[0]) == ["fr-FR", "de-DE"]


def test_validate_paths_reports_every_missing_catalog(tmp_path: Path) -> None:
    write_config(tmp_path)
    touch_catalogs(tmp_path, "en-US", "fr-FR")
    project = load_project(tmp_path)

    with pytest.raises(CatalogNotFoundError) as excinfo:
        validate_paths(project)

    assert "de-DE.po" in str(excinfo.value)
    assert "fr-FR.po" not in str(excinfo.value)


def test_validate_paths_passes_when_catalogs_exist(tmp_path: Path) -> None:
    write_config(tmp_path)
    touch_catalogs(tmp_path, "en-US", "fr-FR", "de-DE")

    validate_paths(load_project(tmp_path))


def test_get_settings_reads_dotenv_and_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / ".env").write_text(
        "OPENAI_API_KEY=from-dotenv\nLINGUCI_PROVIDER_DEBUG=true\nUNRELATED=1\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.invalid")

    settings = get_settings(tmp_path)

    assert settings.OPENAI_API_KEY == "from-dotenv"
    assert settings.LINGUCI_PROVIDER_DEBUG is True
    assert settings.AZURE_OPENAI_ENDPOINT == "https://example.invalid"


def test_process_environment_overrides_dotenv(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / ".env").write_text("OPENAI_API_KEY=from-dotenv\n", encoding="utf-8")
    monkeypatch.setenv("OPENAI_API_KEY", "from-env")

    assert get_settings(tmp_path).OPENAI_API_KEY == "from-env"
