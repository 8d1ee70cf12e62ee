from __future__ import annotations

import enum
import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Tuple

import yaml
from pydantic import TypeAdapter

from .exceptions import ConfigurationError, FileReadError, ParseError
from .values import ConfigMap, normalize_map

logger = logging.getLogger(__name__)


class FileType(enum.Enum):
    JSON = "json"
    YAML = "yaml"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, order=True)
class FilePath:
    """A configuration file location, compared and hashed by its string form."""

    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", os.fspath(self.value))

    def file_type(self) -> FileType:
        """Derive the file type from the suffix alone; never touches the disk."""
        if self.value.endswith(".yaml"):
            return FileType.YAML
        if self.value.endswith(".json"):
            return FileType.JSON
        return FileType.UNSUPPORTED

    def __fspath__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class ConfigSource(ABC):
    """A declared origin of configuration data."""

    @property
    @abstractmethod
    def kind(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class FileSource(ConfigSource):
    """
    Configuration stored in a single JSON (.json) or YAML (.yaml) file.

    Two FileSource objects with the same path are the same source.
    """

    path: FilePath

    def __post_init__(self) -> None:
        if not isinstance(self.path, FilePath):
            object.__setattr__(self, "path", FilePath(self.path))

    @property
    def kind(self) -> str:
        return "file"


@dataclass(frozen=True)
class EnvironmentSource(ConfigSource):
    """Process environment variables. Every instance is the same source."""

    @property
    def kind(self) -> str:
        return "environment"


@dataclass(frozen=True)
class CommandLineSource(ConfigSource):
    """Command-line arguments, identified by the full argument list."""

    args: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))

    @property
    def kind(self) -> str:
        return "command_line"


class ConfigReader(ABC):
    """
    Turn the file at a path into a mapping of top-level keys to values.

    Subclasses only implement `parse`; opening the file and mapping I/O
    failures to FileReadError is shared. A read either returns the whole
    document or raises, never a partial mapping.
    """

    format_name: str = ""

    def read(self, path: str | os.PathLike[str]) -> ConfigMap:
        path_str = os.fspath(path)
        try:
            f = open(path_str, "rb")
        except OSError as exc:
            raise FileReadError(path_str, exc.strerror or str(exc)) from exc

        with f:
            try:
                data = self.parse(f)
            except ParseError:
                raise
            except (UnicodeDecodeError, ValueError) as exc:
                raise ParseError(str(exc)) from exc
            except RecursionError as exc:
                raise ParseError(f"document nested too deeply in {path_str}") from exc

        try:
            result = normalize_map(data)
        except TypeError as exc:
            raise ParseError(f"{exc} in {path_str}") from exc
        except RecursionError as exc:
            raise ParseError(f"document nested too deeply in {path_str}") from exc

        logger.debug(
            "Read %d top-level keys from %s file %s",
            len(result),
            self.format_name,
            path_str,
        )
        return result

    @abstractmethod
    def parse(self, stream: IO[bytes]) -> Any:
        """Return the parsed document, which must be a mapping."""
        raise NotImplementedError


class JsonConfigReader(ConfigReader):
    format_name = "JSON"

    def parse(self, stream: IO[bytes]) -> Any:
        # JSONDecodeError is a ValueError; handled by read().
        return json.load(stream)


class YamlConfigReader(ConfigReader):
    format_name = "YAML"

    def parse(self, stream: IO[bytes]) -> Any:
        try:
            data = yaml.safe_load(stream)
        except yaml.YAMLError as exc:
            raise ParseError(str(exc)) from exc
        # An empty document is an empty configuration.
        return {} if data is None else data


_READERS = {
    FileType.JSON: JsonConfigReader,
    FileType.YAML: YamlConfigReader,
}


def reader_for(file_type: FileType) -> ConfigReader | None:
    """Return a reader for `file_type`, or None when the type is unsupported."""
    reader_cls = _READERS.get(file_type)
    return reader_cls() if reader_cls is not None else None


def serialize_to_file(config: Any, path: str | os.PathLike[str]) -> None:
    """
    Write `config` to `path` as pretty-printed JSON.

    `config` may be a mapping, a dataclass, a pydantic model or anything else
    pydantic can dump to JSON-compatible data. The write goes to a temporary
    file next to the target, which then replaces it.
    """
    target = Path(path)
    try:
        data = TypeAdapter(type(config)).dump_python(config, mode="json")
    except Exception as exc:
        raise ConfigurationError(
            f"Could not serialize {type(config).__name__} for {target}: {exc}"
        ) from exc

    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_suffix(target.suffix + ".tmp")

    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        tmp_path.replace(target)
    except OSError as exc:
        raise ConfigurationError(
            f"Could not write JSON config {str(target)!r}: {exc}"
        ) from exc

