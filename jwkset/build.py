"""Compilation of per-environment key sets from individual key files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .config import ENVIRONMENTS, Environment, JWKSetConfig
from .console import now_as_numeric_date
from .exceptions import InvalidJWKError, KeyDirectoryNotFoundError
from .jwk import KeySet, PublicJWK, Violation, load_jwk_text, parse_jwk

logger = logging.getLogger(__name__)

KEY_FILE_PATTERN = re.compile(r"\.jwk(\.jsonc?)?$", re.IGNORECASE)


@dataclass(frozen=True)
class InvalidKeyFile:
    """A key file that was skipped, with the reason."""

    path: Path
    reason: str
    violations: List[Violation] = field(default_factory=list)


@dataclass
class BuildResult:
    keyset: KeySet
    invalid: List[InvalidKeyFile] = field(default_factory=list)


def iter_key_files(directory: Path) -> Iterable[Path]:
    """Yield key files in ``directory`` in directory-listing order."""

    for entry in directory.iterdir():
        if entry.is_file() and KEY_FILE_PATTERN.search(entry.name):
            yield entry


def is_within_validity(jwk: PublicJWK, now: int) -> bool:
    """Return ``False`` for keys not yet valid (``iat``) or expired (``exp``)."""

    if jwk.iat is not None and jwk.iat > now:
        return False
    if jwk.exp is not None and jwk.exp < now:
        return False
    return True


def collect_keys(directory: Path, now: Optional[int] = None) -> BuildResult:
    """Read, check and filter every key file in ``directory``.

    Malformed or invalid files are recorded and skipped. A missing
    directory raises :class:`KeyDirectoryNotFoundError`; other read errors
    propagate.
    """

    if not directory.is_dir():
        raise KeyDirectoryNotFoundError(directory)

    result = BuildResult(keyset=KeySet())

    for path in iter_key_files(directory):
        try:
            jwk = parse_jwk(load_jwk_text(path.read_text(encoding="utf-8")))
        except InvalidJWKError as exc:
            logger.info("Skipping %s: %s", path.name, exc)
            result.invalid.append(InvalidKeyFile(path, str(exc), exc.violations))
            continue
        except ValueError as exc:
            logger.info("Skipping %s: not valid JSON (%s)", path.name, exc)
            result.invalid.append(InvalidKeyFile(path, f"not valid JSON: {exc}"))
            continue

        current = now if now is not None else now_as_numeric_date()
        if not is_within_validity(jwk, current):
            logger.info("Skipping %s: key %s is outside its validity window", path.name, jwk.kid)
            continue

        result.keyset.keys.append(jwk)

    return result


def write_keyset(config: JWKSetConfig, env: Environment, keyset: KeySet) -> Path:
    output_dir = config.dist_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{env}.json"
    output_path.write_text(keyset.to_json(), encoding="utf-8")
    logger.info("Wrote %d key(s) to %s", len(keyset.keys), output_path)
    return output_path


def build_environment(
    config: JWKSetConfig, env: Environment, now: Optional[int] = None
) -> BuildResult:
    """Build and write ``<dist>/<env>.json`` for a single environment."""

    result = collect_keys(config.environment_dir(env), now=now)
    write_keyset(config, env, result.keyset)
    return result


def build_all(config: JWKSetConfig, now: Optional[int] = None) -> Dict[Environment, BuildResult]:
    """Build every environment, production first.

    All environments are collected before anything is written, so a missing
    directory leaves every published key set untouched.
    """

    results = {env: collect_keys(config.environment_dir(env), now=now) for env in ENVIRONMENTS}
    for env, result in results.items():
        write_keyset(config, env, result.keyset)
    return results
