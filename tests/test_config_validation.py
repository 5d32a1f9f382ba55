"""Tests for configuration validation with Pydantic."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from reqchain.domain.config import AppConfig, ClientConfig, RetryConfig
from reqchain.infrastructure.config.config_manager import ConfigManager, ConfigurationError


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep config discovery away from any real .reqchain.yml"""
    monkeypatch.chdir(tmp_path)
    for name in ("REQCHAIN_TIMEOUT", "REQCHAIN_RETRY_ENABLED", "REQCHAIN_RETRY_STATUS_CODES"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def _write_config(path: Path, data) -> Path:
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


class TestClientConfigValidation:
    """Tests for ClientConfig validation."""

    def test_defaults(self):
        """Test default client configuration"""
        config = ClientConfig()
        assert config.timeout == 30.0
        assert config.pool_connections == 10
        assert config.pool_maxsize == 10
        assert config.pool_block is False

    def test_timeout_must_be_positive(self):
        """Test zero timeout is rejected"""
        with pytest.raises(ValidationError, match="timeout"):
            ClientConfig(timeout=0)

    def test_pool_maxsize_must_be_positive(self):
        """Test pool size must be positive"""
        with pytest.raises(ValidationError, match="pool_maxsize"):
            ClientConfig(pool_maxsize=0)


class TestRetryConfigValidation:
    """Tests for RetryConfig validation."""

    def test_defaults(self):
        """Test retry is enabled with built-in status codes"""
        config = RetryConfig()
        assert config.enabled is True
        assert config.status_codes is None

    def test_custom_status_codes(self):
        """Test custom status codes keep their order"""
        config = RetryConfig(status_codes=[503, 429])
        assert config.status_codes == [503, 429]

    def test_duplicate_status_codes_removed(self):
        """Test duplicates are dropped"""
        assert RetryConfig(status_codes=[503, 503, 429]).status_codes == [503, 429]

    def test_empty_status_codes_rejected(self):
        """Test an empty list is rejected"""
        with pytest.raises(ValidationError, match="status_codes"):
            RetryConfig(status_codes=[])

    @pytest.mark.parametrize("code", [99, 600, 1000])
    def test_out_of_range_status_code_rejected(self, code):
        """Test status codes outside 100-599"""
        with pytest.raises(ValidationError, match="invalid HTTP status code"):
            RetryConfig(status_codes=[code])


class TestAppConfigValidation:
    """Tests for AppConfig validation."""

    def test_default_config(self):
        """Test default configuration is valid"""
        config = AppConfig()
        assert config.client.timeout == 30.0
        assert config.retry.enabled is True

    def test_unknown_field_rejected(self):
        """Test unknown fields are rejected"""
        with pytest.raises(ValidationError, match="extra"):
            AppConfig(unknown_field="value")

    def test_nested_validation(self):
        """Test nested validation works"""
        with pytest.raises(ValidationError, match="timeout"):
            AppConfig(client={"timeout": -1})


class TestConfigManager:
    """Tests for ConfigManager loading."""

    def test_default_config_is_valid(self):
        """Test defaults when no config file exists"""
        manager = ConfigManager()
        assert manager.config_path is None
        assert isinstance(manager.config, AppConfig)
        assert isinstance(manager.get_client_config(), ClientConfig)
        assert isinstance(manager.get_retry_config(), RetryConfig)

    def test_load_valid_config_from_file(self, tmp_path):
        """Test loading configuration from an explicit path"""
        path = _write_config(
            tmp_path / "custom.yml",
            {"client": {"timeout": 5}, "retry": {"status_codes": [503]}},
        )

        manager = ConfigManager(config_path=str(path))

        assert manager.config.client.timeout == 5.0
        assert manager.config.client.pool_maxsize == 10
        assert manager.config.retry.status_codes == [503]

    def test_config_found_in_parent_directory(self, tmp_path, monkeypatch):
        """Test .reqchain.yml discovery walks up from cwd"""
        _write_config(tmp_path / ".reqchain.yml", {"retry": {"enabled": False}})
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        manager = ConfigManager()

        assert manager.config_path == tmp_path / ".reqchain.yml"
        assert manager.config.retry.enabled is False

    def test_load_invalid_config_raises_error(self, tmp_path):
        """Test invalid values are reported per field"""
        path = _write_config(tmp_path / "bad.yml", {"retry": {"status_codes": [700]}})

        with pytest.raises(ConfigurationError, match="retry.status_codes"):
            ConfigManager(config_path=path)

    def test_malformed_yaml_raises_error(self, tmp_path):
        """Test unparsable YAML is reported"""
        path = tmp_path / "broken.yml"
        path.write_text("client: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Failed to load config"):
            ConfigManager(config_path=path)

    def test_non_mapping_config_raises_error(self, tmp_path):
        """Test a YAML list at the top level is rejected"""
        path = _write_config(tmp_path / "list.yml", [1, 2, 3])

        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigManager(config_path=path)

    def test_env_overrides_work(self, monkeypatch):
        """Test environment variable overrides"""
        monkeypatch.setenv("REQCHAIN_TIMEOUT", "2.5")
        monkeypatch.setenv("REQCHAIN_RETRY_ENABLED", "false")
        monkeypatch.setenv("REQCHAIN_RETRY_STATUS_CODES", "429, 503,")

        manager = ConfigManager()

        assert manager.config.client.timeout == 2.5
        assert manager.config.retry.enabled is False
        assert manager.config.retry.status_codes == [429, 503]

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test environment wins over the config file"""
        path = _write_config(tmp_path / "custom.yml", {"client": {"timeout": 5}})
        monkeypatch.setenv("REQCHAIN_TIMEOUT", "9")

        assert ConfigManager(config_path=path).config.client.timeout == 9.0

    def test_get_dot_notation(self):
        """Test get() with dotted keys"""
        manager = ConfigManager()
        assert manager.get("client.timeout") == 30.0
        assert manager.get("retry")["enabled"] is True
        assert manager.get("client.missing", "fallback") == "fallback"
