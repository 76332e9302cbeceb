import json

import pytest

from media_chain import config
from media_chain.config import DEFAULT_MUSIC_ENDPOINT, load_config
from media_chain.errors import ConfigMissing

SECRETS = {
    "OPENAI_API_KEY": "sk-test",
    "ELEVENLABS_VOICE_ID": "voice-1",
    "ELEVENLABS_API_KEY": "xi-test",
}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for key in [*SECRETS, "ASSISTANT_ID", "ASSISTANT_MAX_POLLS", "MUSIC_API_URL"]:
        monkeypatch.delenv(key, raising=False)


def set_secrets(monkeypatch, **overrides):
    for key, value in {**SECRETS, **overrides}.items():
        monkeypatch.setenv(key, value)


def test_defaults_from_environment(monkeypatch):
    set_secrets(monkeypatch)
    settings = load_config()

    assert settings.openai_api_key == "sk-test"
    assert settings.elevenlabs_voice_id == "voice-1"
    assert settings.assistant_id is None
    assert settings.music_endpoint == DEFAULT_MUSIC_ENDPOINT
    assert settings.max_polls is None


@pytest.mark.parametrize("missing", sorted(SECRETS))
def test_missing_secret_is_fatal(monkeypatch, missing):
    set_secrets(monkeypatch)
    monkeypatch.delenv(missing)

    with pytest.raises(ConfigMissing) as excinfo:
        load_config()
    assert excinfo.value.key == missing


def test_file_values_and_env_overrides(monkeypatch, tmp_path):
    set_secrets(monkeypatch)
    monkeypatch.setenv("ASSISTANT_ID", "asst_env")
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "openai": {"assistant_id": "asst_file", "poll_interval": 0.5, "max_polls": 30},
                "music": {"endpoint": "https://music.example"},
                "assets": {"output_root": "media"},
            }
        )
    )

    settings = load_config()

    assert settings.assistant_id == "asst_env"
    assert settings.poll_interval == 0.5
    assert settings.max_polls == 30
    assert settings.music_endpoint == "https://music.example"
    assert settings.output_root == "media"


def test_settings_are_immutable(monkeypatch):
    set_secrets(monkeypatch)
    settings = load_config()
    with pytest.raises(AttributeError):
        settings.openai_api_key = "other"
