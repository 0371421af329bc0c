"""
Configuration management package for the File Searcher.

This package provides configuration parsing, validation, and management
functionality for the File Searcher.
"""

from .parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config,
    validate_config_file,
    create_config_template,
    configure_logging
)

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
    'load_config',
    'validate_config_file',
    'create_config_template',
    'configure_logging'
]
