"""Creation of new EC P-384 signing keys."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

from .config import Environment, JWKSetConfig
from .console import now_as_numeric_date
from .exceptions import EnvironmentSelectionError, KeyExistsError
from .jwk import ALG, PRIVATE_KEY_OPS, PUBLIC_KEY_OPS, USE, validate_jwk

logger = logging.getLogger(__name__)

KEY_FILE_SUFFIX = ".jwk.jsonc"


@dataclass(frozen=True)
class GeneratedKey:
    public: Dict[str, Any]
    private: Dict[str, Any]


def resolve_environment(production: bool, staging: Optional[bool]) -> Environment:
    """Pick the target environment from the command line flags.

    ``staging`` is ``None`` when the flag was not given. Production wins
    over the staging default, but asking for both explicitly is ambiguous.
    """

    if production and staging:
        raise EnvironmentSelectionError(
            "Both --production and --staging were given, please specify only one"
        )
    if production:
        return "production"
    if staging is None or staging:
        return "staging"
    raise EnvironmentSelectionError("Please specify either --production or --staging")


def make_kid(iat: int) -> str:
    return f"{str(uuid.uuid4())[:4]}_{iat}"


def key_file_path(config: JWKSetConfig, env: Environment, name: str) -> Path:
    return config.environment_dir(env) / f"{name}{KEY_FILE_SUFFIX}"


def generate_key_pair(now: Optional[int] = None) -> GeneratedKey:
    """Generate a P-384 key pair and return both halves as JWKs.

    The public half carries ``iat``; the private half only the ``kid``.
    Both are checked against their JWK shape before being returned.
    """

    iat = now if now is not None else now_as_numeric_date()
    kid = make_kid(iat)

    private_key = ec.generate_private_key(ec.SECP384R1())
    public_coords = json.loads(jwt.algorithms.ECAlgorithm.to_jwk(private_key.public_key()))
    private_coords = json.loads(jwt.algorithms.ECAlgorithm.to_jwk(private_key))

    public = {
        "kty": public_coords["kty"],
        "crv": public_coords["crv"],
        "alg": ALG,
        "x": public_coords["x"],
        "y": public_coords["y"],
        "key_ops": list(PUBLIC_KEY_OPS),
        "use": USE,
        "kid": kid,
        "iat": iat,
    }
    private = {
        "kty": private_coords["kty"],
        "crv": private_coords["crv"],
        "alg": ALG,
        "x": private_coords["x"],
        "y": private_coords["y"],
        "d": private_coords["d"],
        "key_ops": list(PRIVATE_KEY_OPS),
        "use": USE,
        "kid": kid,
    }

    validate_jwk(public)
    validate_jwk(private, private=True)
    return GeneratedKey(public=public, private=private)


def render_private_key(private: Dict[str, Any]) -> str:
    """Render the private JWK as a single compact JSON line."""
    return json.dumps(private, separators=(",", ":"))


def render_key_file(public: Dict[str, Any], comment: str = "") -> str:
    """Render the public JWK as JSON-with-comments text."""
    prefix = f"// {comment}\n" if comment else ""
    return prefix + json.dumps(public, indent=2) + "\n"


def ensure_writable(path: Path, force: bool) -> bool:
    """Check whether ``path`` may be written.

    Returns ``True`` when an existing file is about to be overwritten.
    Raises :class:`KeyExistsError` when it exists and ``force`` is not set.
    Errors other than "not found" propagate.
    """

    try:
        path.lstat()
    except FileNotFoundError:
        return False

    if not force:
        raise KeyExistsError(path)
    return True


def write_key_file(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote public JWK to %s", path)
