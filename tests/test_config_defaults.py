"""
Unit tests for the layered configuration helpers
"""
import pytest

from bloglist_api import config_defaults


@pytest.fixture
def env_dir(tmp_path, monkeypatch):
    """Point the loader at a scratch directory with its own .env files."""
    monkeypatch.setattr(config_defaults, '_candidate_dirs', lambda: [tmp_path])
    config_defaults.load_defaults.cache_clear()
    yield tmp_path
    config_defaults.load_defaults.cache_clear()


class TestConfigDefaults:

    def test_env_overlays_defaults(self, env_dir):
        (env_dir / '.env.defaults').write_text(
            "# catalog\nSESSION_LIFETIME=3600\nLOG_LEVEL='INFO'\nnot a pair\n",
            encoding='utf-8',
        )
        (env_dir / '.env').write_text('LOG_LEVEL="DEBUG"\n', encoding='utf-8')

        defaults = config_defaults.load_defaults()

        assert defaults == {'SESSION_LIFETIME': '3600', 'LOG_LEVEL': 'DEBUG'}

    def test_environment_wins(self, env_dir, monkeypatch):
        (env_dir / '.env.defaults').write_text('SESSION_LIFETIME=3600\n', encoding='utf-8')
        monkeypatch.setenv('SESSION_LIFETIME', '60')

        assert config_defaults.get_int_setting('SESSION_LIFETIME', 10) == 60

    def test_fallback_when_unset(self, env_dir, monkeypatch):
        monkeypatch.delenv('BLOGLIST_UNSET_KEY', raising=False)

        assert config_defaults.get_setting('BLOGLIST_UNSET_KEY', 'x') == 'x'
        assert config_defaults.get_bool_setting('BLOGLIST_UNSET_KEY') is False

    @pytest.mark.parametrize('value,expected', [
        ('true', True), ('1', True), ('YES', True), ('false', False), ('0', False),
    ])
    def test_bool_setting(self, env_dir, monkeypatch, value, expected):
        monkeypatch.setenv('ENABLE_TESTING_API', value)
        assert config_defaults.get_bool_setting('ENABLE_TESTING_API') is expected
