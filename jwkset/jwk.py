"""Shape checks and typed records for EC P-384 signing keys."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Union

import json5
from pydantic import BaseModel, ConfigDict

from .exceptions import InvalidJWKError

KTY = "EC"
CRV = "P-384"
ALG = "ES384"
USE = "sig"
PUBLIC_KEY_OPS = ["verify"]
PRIVATE_KEY_OPS = ["sign"]

# Fields published in a key set, in output order.
CANONICAL_FIELDS = ("kty", "use", "key_ops", "alg", "kid", "crv", "x", "y")

_LITERALS = {"kty": KTY, "crv": CRV, "alg": ALG, "use": USE}
_STRINGS = ("x", "y", "kid")
_NUMBERS = ("iat", "exp")


@dataclass(frozen=True)
class Violation:
    """A single field-level problem found while checking a JWK."""

    field: str
    kind: Literal["not_object", "missing", "literal", "type", "additional"]
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _check_literal(field: str, expected: Any) -> Callable[[Dict[str, Any]], Optional[Violation]]:
    def check(value: Dict[str, Any]) -> Optional[Violation]:
        if value[field] != expected or type(value[field]) is not type(expected):
            return Violation(field, "literal", f"expected {expected!r}, got {value[field]!r}")
        return None

    return check


def _check_string(field: str) -> Callable[[Dict[str, Any]], Optional[Violation]]:
    def check(value: Dict[str, Any]) -> Optional[Violation]:
        if not isinstance(value[field], str):
            return Violation(field, "type", f"expected string, got {type(value[field]).__name__}")
        return None

    return check


def _check_number(field: str) -> Callable[[Dict[str, Any]], Optional[Violation]]:
    def check(value: Dict[str, Any]) -> Optional[Violation]:
        if not _is_number(value[field]):
            return Violation(field, "type", f"expected finite number, got {value[field]!r}")
        return None

    return check


def _required_checks(private: bool) -> Dict[str, Callable[[Dict[str, Any]], Optional[Violation]]]:
    checks: Dict[str, Callable[[Dict[str, Any]], Optional[Violation]]] = {}
    for field, expected in _LITERALS.items():
        checks[field] = _check_literal(field, expected)
    for field in _STRINGS:
        checks[field] = _check_string(field)
    checks["key_ops"] = _check_literal("key_ops", PRIVATE_KEY_OPS if private else PUBLIC_KEY_OPS)
    if private:
        checks["d"] = _check_string("d")
    return checks


def find_violations(value: Any, private: bool = False) -> List[Violation]:
    """Return every way ``value`` deviates from the JWK shape."""

    if not isinstance(value, dict):
        return [Violation("", "not_object", f"expected object, got {type(value).__name__}")]

    violations: List[Violation] = []
    required = _required_checks(private)
    optional = {field: _check_number(field) for field in _NUMBERS}

    for field, check in required.items():
        if field not in value:
            violations.append(Violation(field, "missing", "required property is missing"))
            continue
        problem = check(value)
        if problem is not None:
            violations.append(problem)

    for field, check in optional.items():
        if field in value:
            problem = check(value)
            if problem is not None:
                violations.append(problem)

    for field in value:
        if field not in required and field not in optional:
            violations.append(Violation(str(field), "additional", "unexpected property"))

    return violations


def validate_jwk(value: Any, private: bool = False) -> bool:
    """Check ``value`` against the public (or private) JWK shape.

    Returns ``True`` when it matches exactly. Otherwise raises
    :class:`InvalidJWKError` listing every violation at once.
    """

    violations = find_violations(value, private=private)
    if violations:
        raise InvalidJWKError(violations)
    return True


is_jwk = validate_jwk


class PublicJWK(BaseModel):
    """A public signing key as published in a key set."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kty: Literal["EC"]
    use: Literal["sig"]
    key_ops: Tuple[Literal["verify"]]
    alg: Literal["ES384"]
    kid: str
    crv: Literal["P-384"]
    x: str
    y: str
    iat: Optional[Union[int, float]] = None
    exp: Optional[Union[int, float]] = None

    def canonical(self) -> Dict[str, Any]:
        """Return only the published fields, in publishing order."""
        return self.model_dump(mode="json", include=set(CANONICAL_FIELDS))


def parse_jwk(value: Any) -> PublicJWK:
    """Validate ``value`` and return it as a :class:`PublicJWK`."""
    validate_jwk(value)
    return PublicJWK.model_validate(value)


class KeySet(BaseModel):
    """A JWK Set: ordered, not deduplicated by ``kid``."""

    keys: List[PublicJWK] = []

    def to_document(self) -> Dict[str, Any]:
        return {"keys": [key.canonical() for key in self.keys]}

    def to_json(self) -> str:
        return json.dumps(self.to_document(), separators=(",", ":"))


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON number")


def load_jwk_text(text: str) -> Any:
    """Parse JSON-with-comments text.

    Raises ``ValueError`` on malformed input, including the non-finite
    number literals (``NaN``, ``Infinity``) that JSON5 would otherwise allow.
    """
    return json5.loads(text, parse_constant=_reject_constant)
