from __future__ import annotations

"""
confstack - Layered JSON/YAML configuration with typed access.

This package provides:
- ConfigManagerBuilder: declares sources and merges them, later sources winning.
- ConfigManager: the merged key-value store with typed getters.
- File sources (JSON, YAML) and a file-change watch channel.
"""

import logging

from .exceptions import (
    ConfigurationError,
    EmptySourcesError,
    FeatureNotSupportedError,
    FileReadError,
    FileWatchError,
    KeyNotFoundError,
    NullValueError,
    ParseError,
    ProfileNotFoundError,
    ValidationError,
)
from .manager import ConfigManager, ConfigManagerBuilder
from .sources import (
    CommandLineSource,
    ConfigReader,
    ConfigSource,
    EnvironmentSource,
    FilePath,
    FileSource,
    FileType,
    JsonConfigReader,
    YamlConfigReader,
    serialize_to_file,
)
from .values import ConfigMap, StructuredValue
from .watch import FileEvent, WatchChannel

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConfigurationError",
    "EmptySourcesError",
    "FeatureNotSupportedError",
    "FileReadError",
    "FileWatchError",
    "KeyNotFoundError",
    "NullValueError",
    "ParseError",
    "ProfileNotFoundError",
    "ValidationError",
    "ConfigManager",
    "ConfigManagerBuilder",
    "CommandLineSource",
    "ConfigReader",
    "ConfigSource",
    "EnvironmentSource",
    "FilePath",
    "FileSource",
    "FileType",
    "JsonConfigReader",
    "YamlConfigReader",
    "serialize_to_file",
    "ConfigMap",
    "StructuredValue",
    "FileEvent",
    "WatchChannel",
]
