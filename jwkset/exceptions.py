"""Exceptions raised by the key tooling."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .jwk import Violation


class JWKSetError(Exception):
    """Base class for all key tooling errors."""


class InvalidJWKError(JWKSetError, ValueError):
    """A value does not match the accepted JWK shape.

    Carries every violation found, not only the first one.
    """

    def __init__(self, violations: List["Violation"]) -> None:
        self.violations = list(violations)
        lines = "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(f"Invalid JWK ({len(self.violations)} problem(s)):\n{lines}")


class KeyExistsError(JWKSetError):
    """A key file with the requested name already exists."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"JWK already exists: {path}")


class EnvironmentSelectionError(JWKSetError):
    """No single target environment could be resolved from the flags."""


class KeyDirectoryNotFoundError(JWKSetError):
    """An environment directory to build from does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Key directory does not exist: {path}")
