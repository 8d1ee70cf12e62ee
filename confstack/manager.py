from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .exceptions import (
    EmptySourcesError,
    FeatureNotSupportedError,
    FileReadError,
    KeyNotFoundError,
    NullValueError,
    ParseError,
)
from .sources import ConfigSource, FileSource, reader_for
from .utils import deep_merge, merge_flat
from .validation import validate_config
from .values import (
    ConfigMap,
    StructuredValue,
    as_bool,
    as_f64,
    as_i64,
    as_number,
    as_str,
    as_u64,
    normalize,
    normalize_map,
)
from .watch import WatchChannel, watch_file

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigManagerBuilder:
    """
    Collects configuration sources and builds a ConfigManager from them.

    Sources are kept in insertion order without duplicates; when two sources
    define the same key, the one added later wins.

    Typical usage:

        from confstack import ConfigManagerBuilder, FileSource

        manager = (
            ConfigManagerBuilder()
            .add_source(FileSource("defaults.yaml"))
            .add_source(FileSource("local.json"))
            .build()
        )

        port = manager.get_i64("port")
    """

    def __init__(
        self,
        *,
        deep: bool = False,
        schema: Mapping[str, Any] | None = None,
    ):
        """
        :param deep: Merge nested objects key by key instead of replacing
                     top-level values wholesale.
        :param schema: Optional JSON Schema the merged configuration must satisfy.
        """
        # dict as an ordered set: values are unused
        self._sources: Dict[ConfigSource, None] = {}
        self._deep = deep
        self._schema = schema

    def add_source(self, source: ConfigSource) -> "ConfigManagerBuilder":
        """Declare a source. Adding the same source again is a no-op."""
        if not isinstance(source, ConfigSource):
            raise TypeError(f"Expected a ConfigSource, got {type(source).__name__}")
        self._sources.setdefault(source, None)
        return self

    def add_sources(self, sources: Iterable[ConfigSource]) -> "ConfigManagerBuilder":
        for source in sources:
            self.add_source(source)
        return self

    @property
    def sources(self) -> Tuple[ConfigSource, ...]:
        return tuple(self._sources)

    def build(self) -> "ConfigManager":
        """
        Read every source, merge the results and return a ConfigManager.

        :raises EmptySourcesError: if no source was added.
        :raises ConfigurationError: if any source fails; nothing is returned
                                    from a partially read set of sources.
        """
        if not self._sources:
            raise EmptySourcesError()

        merge = deep_merge if self._deep else merge_flat
        merged: Dict[str, Any] = {}
        for source in self._sources:
            data = _load_source(source)
            merged = merge(merged, data)
            logger.debug("Merged %d keys from %r", len(data), source)

        validate_config(merged, self._schema)

        return ConfigManager(merged, list(self._sources))


def _load_source(source: ConfigSource) -> ConfigMap:
    if not isinstance(source, FileSource):
        raise FeatureNotSupportedError(f"{source.kind} source")

    file_type = source.path.file_type()
    reader = reader_for(file_type)
    if reader is None:
        raise FileReadError(str(source.path), "Unsupported")
    return reader.read(source.path)


class ConfigManager:
    """
    Holds the merged configuration and gives typed access to it.

    Getters return None when a key is missing or its value has the wrong
    type; the two cases are not distinguished. Container values handed out
    by the read accessors are copies; use `get_mut` or `set` to change the
    stored configuration.

    A ConfigManager does no locking. Callers sharing one between threads
    while mutating it must synchronize themselves.
    """

    def __init__(
        self,
        configs: Mapping[str, Any],
        sources: Iterable[ConfigSource] = (),
    ):
        self._configs: Dict[str, StructuredValue] = normalize_map(configs)
        self._sources: List[ConfigSource] = list(sources)

    @property
    def sources(self) -> Tuple[ConfigSource, ...]:
        """Declared sources in precedence order (lowest first)."""
        return tuple(self._sources)

    def __contains__(self, key: object) -> bool:
        return key in self._configs

    def __len__(self) -> int:
        return len(self._configs)

    def __repr__(self) -> str:
        keys_preview = ", ".join(list(self._configs.keys())[:5])
        more = "..." if len(self._configs) > 5 else ""
        return f"<ConfigManager keys=[{keys_preview}{more}]>"

    def keys(self) -> List[str]:
        return list(self._configs)

    def values(self) -> Iterator[StructuredValue]:
        """Iterate over copies of all stored values. No order is promised."""
        for value in self._configs.values():
            yield copy.deepcopy(value)

    def to_dict(self) -> Dict[str, StructuredValue]:
        """Return a deep copy of the merged configuration."""
        return copy.deepcopy(self._configs)

    def get(self, key: str, default: Any = None) -> Any:
        """Return value for key if present, else default."""
        if key in self._configs:
            return copy.deepcopy(self._configs[key])
        return default

    def try_get(self, key: str) -> StructuredValue:
        """
        Return the value stored at `key`.

        :raises NullValueError: if there is no value at `key`.
        """
        try:
            return copy.deepcopy(self._configs[key])
        except KeyError:
            raise NullValueError(key) from None

    def get_key_value(self, key: str) -> Optional[Tuple[str, StructuredValue]]:
        if key not in self._configs:
            return None
        return key, copy.deepcopy(self._configs[key])

    def get_string(self, key: str) -> Optional[str]:
        return as_str(self._configs.get(key))

    # alias
    get_str = get_string

    def get_bool(self, key: str) -> Optional[bool]:
        return as_bool(self._configs.get(key))

    def get_i64(self, key: str) -> Optional[int]:
        """Integer value in signed 64-bit range. Floats and bools are rejected."""
        return as_i64(self._configs.get(key))

    def get_u64(self, key: str) -> Optional[int]:
        """Non-negative integer value below 2**64."""
        return as_u64(self._configs.get(key))

    def get_f64(self, key: str) -> Optional[float]:
        """Any numeric value, as a float."""
        return as_f64(self._configs.get(key))

    def get_number(self, key: str) -> Optional[Union[int, float]]:
        return as_number(self._configs.get(key))

    def get_object(self, key: str) -> Optional[Dict[str, StructuredValue]]:
        value = self._configs.get(key)
        if isinstance(value, dict):
            return copy.deepcopy(value)
        return None

    def get_vec(self, key: str, item_type: Type[T] = Any) -> Optional[List[T]]:  # type: ignore[assignment]
        """
        Deserialize the array at `key` element by element into `item_type`.

        Returns None if the key is missing, the value is not an array, or any
        single element fails to deserialize.
        """
        value = self._configs.get(key)
        if not isinstance(value, list):
            return None

        adapter = TypeAdapter(item_type)
        items: List[T] = []
        for item in value:
            try:
                items.append(adapter.validate_python(copy.deepcopy(item)))
            except PydanticValidationError:
                return None
        return items

    def get_struct(self, key: str, target: Type[T]) -> T:
        """
        Deserialize the value at `key` into `target`.

        `target` may be a dataclass, TypedDict, pydantic model or any other
        type pydantic can validate.

        :raises KeyNotFoundError: if `key` is absent.
        :raises ParseError: if the value does not fit `target`.
        """
        if key not in self._configs:
            raise KeyNotFoundError(key)
        return _deserialize(target, self._configs[key])

    def parse(self, target: Type[T]) -> T:
        """
        Deserialize the whole configuration, as one object, into `target`.

        :raises ParseError: if the configuration does not fit `target`.
        """
        return _deserialize(target, self._configs)

    def get_mut(self, key: str) -> Optional[StructuredValue]:
        """
        Return the stored value itself, not a copy.

        Changes made to a returned list or dict are visible to later reads.
        Scalars are immutable in Python; replace them with `set`.
        """
        return self._configs.get(key)

    def set(self, key: str, value: Any) -> None:
        """Store `value` at `key`, replacing any previous value."""
        try:
            self._configs[key] = normalize(value)
        except TypeError as exc:
            raise ParseError(str(exc)) from exc

    def take(self, key: str) -> StructuredValue:
        """
        Return the value at `key` and leave None in its place.

        :raises KeyError: if `key` is absent. Taking a key that was never
                          loaded is a caller bug, not a configuration problem.
        """
        if key not in self._configs:
            raise KeyError(key)
        value, self._configs[key] = self._configs[key], None
        return value

    def watch_file_changes(
        self,
        shutdown: threading.Event,
        *,
        poll_interval: float = 0.1,
    ) -> WatchChannel:
        """
        Watch the first declared source for changes until `shutdown` is set.

            shutdown = threading.Event()
            with manager.watch_file_changes(shutdown) as events:
                for event in events:
                    print(event.kind, event.path)

        :raises ValueError: if the first source is not a FileSource.
        :raises FileWatchError: if the watch cannot be set up.
        """
        if not self._sources:
            raise ValueError("No sources to watch")
        first = self._sources[0]
        if not isinstance(first, FileSource):
            raise ValueError(
                f"Only file sources can be watched; first source is {first.kind}"
            )
        return watch_file(first.path, shutdown, poll_interval=poll_interval)


def _deserialize(target: Type[T], value: Any) -> T:
    try:
        return TypeAdapter(target).validate_python(copy.deepcopy(value))
    except PydanticValidationError as exc:
        raise ParseError(str(exc)) from exc
