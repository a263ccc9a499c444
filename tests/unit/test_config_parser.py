"""
Unit tests for configuration parser.

Tests the YAML configuration parsing, discovery, validation, and error
handling functionality of the ConfigParser class.
"""

import pytest
import tempfile
import os
import yaml
from pathlib import Path
from unittest.mock import patch

from multifind.config.parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config,
    validate_config_file,
    create_config_template
)
from multifind.models.config import ExecutorKind, FinderConfig


def _write_temp(content: str) -> str:
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(content)
        return f.name


class TestConfigParser:
    """Test cases for ConfigParser class."""

    def test_init_default(self):
        parser = ConfigParser()
        assert parser.strict_mode is False
        assert parser.DEFAULT_CONFIG_NAMES == [
            '.multifind.yaml',
            '.multifind.yml',
            'multifind.yaml',
            'multifind.yml',
        ]

    def test_load_config_with_valid_file(self):
        temp_path = _write_temp(yaml.dump({
            'executor': 'thread',
            'poll_interval': 0.5,
            'defaults': {'recursive': True},
        }))

        try:
            result = ConfigParser().load_config(temp_path)

            assert isinstance(result, ConfigParseResult)
            assert isinstance(result.config, FinderConfig)
            assert result.config.executor is ExecutorKind.THREAD
            assert result.config.poll_interval == 0.5
            assert result.config.defaults.recursive is True
            assert result.config_path == Path(temp_path)
            assert result.is_default is False
        finally:
            os.unlink(temp_path)

    def test_load_config_file_not_found(self):
        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            ConfigParser().load_config("/nonexistent/config.yaml")

    def test_load_config_invalid_yaml(self):
        temp_path = _write_temp("executor: [\n")

        try:
            with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
                ConfigParser().load_config(temp_path)
        finally:
            os.unlink(temp_path)

    def test_load_config_empty_file(self):
        """An empty file yields the default configuration."""
        temp_path = _write_temp("")

        try:
            result = ConfigParser().load_config(temp_path)

            assert result.config == FinderConfig()
            assert result.config_path == Path(temp_path)
            assert result.is_default is False
        finally:
            os.unlink(temp_path)

    def test_load_config_non_dict_yaml(self):
        temp_path = _write_temp("- item1\n- item2")

        try:
            with pytest.raises(ConfigurationError, match="must contain a YAML object"):
                ConfigParser().load_config(temp_path)
        finally:
            os.unlink(temp_path)

    def test_load_config_unknown_key(self):
        temp_path = _write_temp("roots: ['.']\n")

        try:
            with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
                ConfigParser().load_config(temp_path)
        finally:
            os.unlink(temp_path)

    def test_load_config_invalid_value(self):
        temp_path = _write_temp("executor: greenlet\n")

        try:
            with pytest.raises(ConfigurationError, match="Configuration validation failed"):
                ConfigParser().load_config(temp_path)
        finally:
            os.unlink(temp_path)

    def test_strict_mode_rejects_warnings(self):
        temp_path = _write_temp("poll_interval: 30\n")

        try:
            with pytest.raises(ConfigurationError, match="strict mode"):
                ConfigParser(strict_mode=True).load_config(temp_path)

            result = ConfigParser().load_config(temp_path)
            assert result.warnings
        finally:
            os.unlink(temp_path)

    def test_strict_mode_accepts_thread_executor(self):
        temp_path = _write_temp("executor: thread\njoin_timeout: 2\n")

        try:
            result = ConfigParser(strict_mode=True).load_config(temp_path)

            assert result.config.executor is ExecutorKind.THREAD
            assert result.warnings == []
        finally:
            os.unlink(temp_path)


class TestConfigDiscovery:
    """Test cases for default configuration file discovery."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.cwd = Path(self.temp_dir) / "cwd"
        self.home = Path(self.temp_dir) / "home"
        self.cwd.mkdir()
        self.home.mkdir()

    def teardown_method(self):
        import shutil
        shutil.rmtree(self.temp_dir)

    def _load(self):
        with patch("multifind.config.parser.Path.cwd", return_value=self.cwd), \
             patch("multifind.config.parser.Path.home", return_value=self.home):
            return ConfigParser().load_config()

    def test_defaults_when_nothing_found(self):
        result = self._load()

        assert result.is_default is True
        assert result.config_path is None
        assert result.config == FinderConfig()
        assert "No configuration file found, using default settings" in result.warnings

    def test_cwd_file_found(self):
        (self.cwd / ".multifind.yaml").write_text("join_timeout: 2\n")

        result = self._load()

        assert result.is_default is False
        assert result.config_path == self.cwd / ".multifind.yaml"
        assert result.config.join_timeout == 2

    def test_cwd_wins_over_home(self):
        (self.cwd / "multifind.yml").write_text("join_timeout: 3\n")
        (self.home / ".multifind.yaml").write_text("join_timeout: 4\n")

        assert self._load().config.join_timeout == 3

    def test_xdg_location(self):
        xdg = self.home / ".config" / "multifind"
        xdg.mkdir(parents=True)
        (xdg / "multifind.yaml").write_text("log_level: info\n")

        result = self._load()

        assert result.config_path == xdg / "multifind.yaml"
        assert result.config.log_level == "INFO"

    def test_broken_file_skipped(self):
        (self.cwd / ".multifind.yaml").write_text("- not a mapping\n")
        (self.home / ".multifind.yaml").write_text("join_timeout: 7\n")

        result = self._load()

        assert result.config_path == self.home / ".multifind.yaml"
        assert result.config.join_timeout == 7


class TestConfigFiles:
    """Test cases for saving, templates and validation helpers."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        import shutil
        shutil.rmtree(self.temp_dir)

    def test_save_config_round_trip(self):
        config = FinderConfig(executor="thread", join_timeout=9, defaults={'ignore_case': True})
        output = Path(self.temp_dir) / "nested" / "multifind.yaml"

        ConfigParser().save_config(config, output)

        content = output.read_text()
        assert content.startswith("# multifind configuration")
        assert load_config(output).config == config

    def test_create_config_template(self):
        output = Path(self.temp_dir) / "template.yaml"
        create_config_template(output)

        data = yaml.safe_load(output.read_text())
        assert data['executor'] == 'process'
        assert data['start_method'] is None
        assert data['defaults'] == {'recursive': False, 'ignore_case': False}
        assert validate_config_file(output) == []

    def test_validate_config_file_missing(self):
        errors = validate_config_file(Path(self.temp_dir) / "missing.yaml")
        assert errors == [f"Configuration file not found: {Path(self.temp_dir) / 'missing.yaml'}"]

    def test_validate_config_file_invalid(self):
        path = Path(self.temp_dir) / "bad.yaml"
        path.write_text("poll_interval: -1\n")

        errors = validate_config_file(path)

        assert len(errors) == 1
        assert "Configuration validation failed" in errors[0]
