import pytest
from pydantic import ValidationError

from pairing.config import ENV_MAX_RETRIES, ENV_RANDOM_SEED, EngineSettings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so whatever load_dotenv writes is undone after the test
    for name in (ENV_MAX_RETRIES, ENV_RANDOM_SEED):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults(tmp_path):
    settings = load_settings(tmp_path / "missing.env")
    assert settings == EngineSettings(max_retries=0, random_seed=None)


def test_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_MAX_RETRIES, "3")
    monkeypatch.setenv(ENV_RANDOM_SEED, "1234")
    settings = load_settings(tmp_path / "missing.env")
    assert settings.max_retries == 3
    assert settings.random_seed == 1234


def test_reads_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(f"{ENV_MAX_RETRIES}=2\n", encoding="utf-8")
    assert load_settings(env_file).max_retries == 2


def test_rejects_negative_retries(monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_MAX_RETRIES, "-1")
    with pytest.raises(ValidationError):
        load_settings(tmp_path / "missing.env")
