from voice_relay.config.constants import DEFAULT_REALTIME_MODEL, DEFAULT_VOICE
from voice_relay.config.settings import Settings

ENV_VARS = [
    "OPENAI_API_KEY", "OPENAI_KEY", "OPENAI_REALTIME_MODEL", "VOICE_MODEL", "OPENAI_VOICE",
    "OWNER_NAME", "BUSINESS_NAME", "BARGE_IN_ON_MEDIA", "PUBLIC_BASE_URL",
    "RECORDING_WEBHOOK_SECRET", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN",
    "RESEND_API_KEY", "EMAIL_FROM", "EMAIL_TO",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment(monkeypatch):
    clear_env(monkeypatch)

    settings = Settings.from_env()

    assert settings.openai_api_key is None
    assert settings.realtime_model == DEFAULT_REALTIME_MODEL
    assert settings.voice == DEFAULT_VOICE
    assert settings.owner_name == "Allen"
    assert settings.barge_in_on_media is True
    assert settings.email_configured is False


def test_reads_environment(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_REALTIME_MODEL", "gpt-realtime")
    monkeypatch.setenv("OWNER_NAME", "Dana")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://relay.example.com")
    monkeypatch.setenv("RESEND_API_KEY", "re_x")
    monkeypatch.setenv("EMAIL_FROM", "a@example.com")
    monkeypatch.setenv("EMAIL_TO", "b@example.com")

    settings = Settings.from_env()

    assert settings.openai_api_key == "sk-test"
    assert settings.realtime_model == "gpt-realtime"
    assert settings.owner_name == "Dana"
    assert settings.public_base_url == "https://relay.example.com"
    assert settings.email_configured is True


def test_alternate_variable_names(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("OPENAI_KEY", "sk-alt")
    monkeypatch.setenv("VOICE_MODEL", "gpt-4o-realtime-preview")

    settings = Settings.from_env()

    assert settings.openai_api_key == "sk-alt"
    assert settings.realtime_model == "gpt-4o-realtime-preview"


def test_barge_in_on_media_flag(monkeypatch):
    clear_env(monkeypatch)

    monkeypatch.setenv("BARGE_IN_ON_MEDIA", "false")
    assert Settings.from_env().barge_in_on_media is False

    monkeypatch.setenv("BARGE_IN_ON_MEDIA", "Yes")
    assert Settings.from_env().barge_in_on_media is True
