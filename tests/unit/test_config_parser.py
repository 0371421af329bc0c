"""
Unit tests for configuration parser.

Tests the YAML configuration parsing, validation, and error handling
functionality of the ConfigParser class.
"""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from filesearcher.config.parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    configure_logging,
    create_config_template,
    load_config,
    validate_config_file,
)
from filesearcher.models.config import SearcherConfig


class TestConfigParser:
    """Test cases for ConfigParser class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.test_root = Path(self.temp_dir.name)

    def teardown_method(self):
        """Clean up test fixtures."""
        self.temp_dir.cleanup()

    def _write_yaml(self, data, name="config.yaml") -> Path:
        path = self.test_root / name
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f)
        return path

    def test_init_default(self):
        """Test default initialization."""
        parser = ConfigParser()
        assert parser.strict_mode is False
        assert parser.DEFAULT_CONFIG_NAMES == [
            '.filesearcher.yaml',
            '.filesearcher.yml',
            'filesearcher.yaml',
            'filesearcher.yml'
        ]

    def test_load_config_with_valid_file(self):
        """Test loading configuration from valid YAML file."""
        config_path = self._write_yaml({
            'default_root': str(self.test_root),
            'traversal': {'max_workers': 2},
            'archives': {'extensions': ['zip', 'jar']}
        })

        result = ConfigParser().load_config(config_path)

        assert isinstance(result, ConfigParseResult)
        assert isinstance(result.config, SearcherConfig)
        assert result.config_path == config_path
        assert result.is_default is False
        assert result.config.traversal.max_workers == 2
        assert result.config.archives.extensions == ['.zip', '.jar']
        assert result.warnings == []

    def test_load_config_file_not_found(self):
        """Test loading configuration from non-existent file."""
        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            ConfigParser().load_config(self.test_root / "missing.yaml")

    def test_load_config_invalid_yaml(self):
        """Test loading configuration with invalid YAML syntax."""
        config_path = self.test_root / "bad.yaml"
        config_path.write_text("traversal: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML syntax"):
            ConfigParser().load_config(config_path)

    def test_load_config_not_a_mapping(self):
        """Test that a YAML list is rejected."""
        config_path = self.test_root / "list.yaml"
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="must contain a YAML object"):
            ConfigParser().load_config(config_path)

    def test_load_config_empty_file(self):
        """Test that an empty file yields default settings."""
        config_path = self.test_root / "empty.yaml"
        config_path.write_text("")

        result = ConfigParser().load_config(config_path)
        assert result.config.archives.extensions == ['.zip']
        assert result.is_default is False

    def test_load_config_invalid_values(self):
        """Test that invalid values are reported as configuration errors."""
        config_path = self._write_yaml({'traversal': {'max_workers': 0}})

        with pytest.raises(ConfigurationError, match="Configuration validation failed"):
            ConfigParser().load_config(config_path)

    def test_load_config_unknown_keys(self):
        """Test that unknown top-level keys are rejected."""
        config_path = self._write_yaml({'vector_db': {'backend': 'x'}})

        with pytest.raises(ConfigurationError, match="Unknown configuration keys: vector_db"):
            ConfigParser().load_config(config_path)

    def test_strict_mode(self):
        """Test that warnings become errors in strict mode."""
        config_path = self._write_yaml({
            'default_root': str(self.test_root),
            'archives': {'enabled': False}
        })

        assert ConfigParser().load_config(config_path).warnings
        with pytest.raises(ConfigurationError, match="strict mode"):
            ConfigParser(strict_mode=True).load_config(config_path)

    def test_discovers_default_config(self):
        """Test configuration discovery in the current directory."""
        self._write_yaml({'traversal': {'max_workers': 3}}, name='.filesearcher.yaml')

        with patch('filesearcher.config.parser.Path.cwd', return_value=self.test_root):
            result = ConfigParser().load_config()

        assert result.is_default is False
        assert result.config_path == self.test_root / '.filesearcher.yaml'
        assert result.config.traversal.max_workers == 3

    def test_no_config_found(self):
        """Test defaults when no configuration file exists."""
        with patch('filesearcher.config.parser.Path.cwd', return_value=self.test_root), \
                patch('filesearcher.config.parser.Path.home', return_value=self.test_root):
            result = ConfigParser().load_config()

        assert result.is_default is True
        assert result.config_path is None
        assert "No configuration file found, using default settings" in result.warnings

    def test_save_and_reload(self):
        """Test saving a configuration and loading it back."""
        config = SearcherConfig(default_root=str(self.test_root), traversal={'max_workers': 5})
        output_path = self.test_root / "nested" / "saved.yaml"

        ConfigParser().save_config(config, output_path)

        content = output_path.read_text()
        assert content.startswith("# File Searcher Configuration")
        assert ConfigParser().load_config(output_path).config == config

    def test_validate_config_file(self):
        """Test validation of configuration files."""
        good = self._write_yaml({'logging': {'level': 'debug'}}, name="good.yaml")
        bad = self._write_yaml({'logging': {'level': 'loud'}}, name="bad.yaml")

        assert validate_config_file(good) == []
        errors = validate_config_file(bad)
        assert len(errors) == 1
        assert "Configuration validation failed" in errors[0]
        assert "not found" in validate_config_file(self.test_root / "missing.yaml")[0]

    def test_create_config_template(self):
        """Test that the template is a loadable configuration."""
        template_path = self.test_root / "template.yaml"
        create_config_template(template_path)

        data = yaml.safe_load(template_path.read_text())
        assert set(data) == {'default_root', 'traversal', 'archives', 'logging'}
        assert isinstance(load_config(template_path).config, SearcherConfig)


class TestConfigureLogging:
    """Test cases for applying logging settings."""

    def test_sets_root_level(self):
        """Test that the configured level is applied to the root logger."""
        root_logger = logging.getLogger()
        previous = root_logger.level
        try:
            configure_logging(SearcherConfig(logging={'level': 'ERROR'}))
            assert root_logger.level == logging.ERROR
        finally:
            root_logger.setLevel(previous)
