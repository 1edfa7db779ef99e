"""Exception types raised by simsipm."""

from __future__ import annotations

import pathlib
from typing import Any, Union


class InvalidParameter(ValueError):
    """Raised when a typed setter receives a value outside its physical domain."""

    def __init__(self, name: str, value: Any, reason: str):
        self.name = name
        self.value = value
        super().__init__(f"invalid value {value!r} for {name}: {reason}")


class UnknownProperty(KeyError):
    """Raised by ``set_property(..., strict=True)`` for unrecognised names."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Property: {self.name} not found!"


class SettingsParseError(ValueError):
    """Raised when a settings file line cannot be parsed."""

    def __init__(self, message: str, *, path: Union[str, pathlib.Path], line: int):
        self.path = str(path)
        self.line = line
        super().__init__(f"{self.path}:{self.line}: {message}")


__all__ = ["InvalidParameter", "UnknownProperty", "SettingsParseError"]
