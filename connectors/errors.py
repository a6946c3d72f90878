from __future__ import annotations


class SourceError(Exception):
    """Base class for connector failures."""


class ConfigError(SourceError, ValueError):
    pass


class ConnectionCheckError(SourceError):
    pass


class StreamNotFoundError(SourceError, KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f'Stream "{self.name}" is not available in this connector'
