"""Tests for configuration management."""
import pytest
from config.settings import Settings


@pytest.fixture
def required_env(monkeypatch):
    monkeypatch.setenv('DISCORD_TOKEN', 'test_discord_token_123')
    monkeypatch.setenv('SUPABASE_URL', 'https://example.supabase.co')
    monkeypatch.setenv('SUPABASE_KEY', 'anon-key')
    for name in ('KOPERASI_SESSION_DB', 'KOPERASI_PREFIX', 'KOPERASI_OWNER_ID', 'KOPERASI_LOG_FILE', 'KOPERASI_LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)


def test_settings_load(required_env):
    """Test loading Settings from environment variables."""
    settings = Settings.load()

    assert settings.discord_token == 'test_discord_token_123'
    assert settings.supabase_url == 'https://example.supabase.co'
    assert settings.supabase_key == 'anon-key'
    assert settings.owner_id is None


def test_settings_load_optional_overrides(required_env, monkeypatch):
    monkeypatch.setenv('KOPERASI_SESSION_DB', '/tmp/session.db')
    monkeypatch.setenv('KOPERASI_PREFIX', '!')
    monkeypatch.setenv('KOPERASI_OWNER_ID', '356096513828454411')
    monkeypatch.setenv('KOPERASI_LOG_LEVEL', 'DEBUG')

    settings = Settings.load()

    assert settings.session_db_path == '/tmp/session.db'
    assert settings.command_prefix == '!'
    assert settings.owner_id == 356096513828454411
    assert settings.log_level == 'DEBUG'


def test_settings_defaults():
    """Test that all default values are correctly set."""
    settings = Settings(
        discord_token='test_token',
        supabase_url='https://example.supabase.co',
        supabase_key='key',
    )

    assert settings.session_db_path == 'koperasi_session.db'
    assert settings.command_prefix == '$'

    # Cache and business rules
    assert settings.cache_stale_seconds == 300
    assert settings.due_soon_days == 3
    assert settings.transaction_page_size == 10
    assert settings.notification_limit == 50

    assert settings.log_file == 'koperasi.log'
    assert settings.log_level == 'INFO'


@pytest.mark.parametrize('missing', ['DISCORD_TOKEN', 'SUPABASE_URL', 'SUPABASE_KEY'])
def test_settings_load_missing_required(required_env, monkeypatch, missing):
    """Test that load() raises ValueError when a required variable is missing."""
    monkeypatch.delenv(missing)

    with pytest.raises(ValueError, match=f"{missing} environment variable is required"):
        Settings.load()
