from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when there is a problem loading, merging or reading configuration."""


class FeatureNotSupportedError(ConfigurationError):
    """Raised when a declared source kind has no reader yet."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Feature not supported: {feature}")


class EmptySourcesError(ConfigurationError):
    """Raised when a build is requested without any declared source."""

    def __init__(self) -> None:
        super().__init__("Must pass sources to read from")


class FileReadError(ConfigurationError):
    """Raised when a configuration file cannot be opened or has an unsupported type."""

    def __init__(self, path: str, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Failed to read configuration file: {detail} [{path}]")


class ParseError(ConfigurationError):
    """Raised when content cannot be deserialized into the requested shape."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Error parsing configuration: {detail}")


class ValidationError(ConfigurationError):
    """Raised when there is a problem validating configuration."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Validation error: {detail}")


class ProfileNotFoundError(ConfigurationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Configuration profile not found: {name}")


class NullValueError(ConfigurationError):
    """Raised by ``ConfigManager.try_get`` when no value is stored at a key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Value: {key} not found in configs map")


class KeyNotFoundError(ConfigurationError):
    """Raised by ``ConfigManager.get_struct`` when a key is absent."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"The key {key} not found on configurations")


class FileWatchError(ConfigurationError):
    """Raised when the file-system watch cannot be registered or dies."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Failed to watch configuration file: {detail}")
