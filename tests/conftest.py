import pytest

from linguci import configuration


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch):
    for name in configuration.LinguciSettings.model_fields:
        monkeypatch.delenv(name, raising=False)
    configuration._load_settings.cache_clear()
    yield
    configuration._load_settings.cache_clear()
