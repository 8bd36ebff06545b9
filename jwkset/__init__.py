"""jwkset: generate EC P-384 signing keys and publish them as JWK sets."""

from .build import BuildResult, InvalidKeyFile, build_all, build_environment, collect_keys
from .config import ENVIRONMENTS, JWKSetConfig, load_config
from .exceptions import (
    EnvironmentSelectionError,
    InvalidJWKError,
    JWKSetError,
    KeyDirectoryNotFoundError,
    KeyExistsError,
)
from .generate import GeneratedKey, generate_key_pair, resolve_environment
from .jwk import KeySet, PublicJWK, Violation, is_jwk, parse_jwk, validate_jwk

__version__ = "0.1.0"
__all__ = [
    "BuildResult",
    "InvalidKeyFile",
    "build_all",
    "build_environment",
    "collect_keys",
    "ENVIRONMENTS",
    "JWKSetConfig",
    "load_config",
    "EnvironmentSelectionError",
    "InvalidJWKError",
    "JWKSetError",
    "KeyDirectoryNotFoundError",
    "KeyExistsError",
    "GeneratedKey",
    "generate_key_pair",
    "resolve_environment",
    "KeySet",
    "PublicJWK",
    "Violation",
    "is_jwk",
    "parse_jwk",
    "validate_jwk",
]
