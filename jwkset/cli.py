"""Command line interface for generating keys and building key sets."""

from __future__ import annotations

import logging
from typing import List, NoReturn, Optional

import typer

from jwkset.build import build_all
from jwkset.config import JWKSetConfig, load_config
from jwkset.console import (
    error,
    highlight,
    label,
    log_if_terminal,
    warn_if_terminal,
)
from jwkset.exceptions import (
    EnvironmentSelectionError,
    KeyDirectoryNotFoundError,
    KeyExistsError,
)
from jwkset.generate import (
    ensure_writable,
    generate_key_pair,
    key_file_path,
    render_key_file,
    render_private_key,
    resolve_environment,
    write_key_file,
)

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
# Everything after the key name is comment text, even words starting with "-".
GEN_CONTEXT_SETTINGS = {**CONTEXT_SETTINGS, "allow_interspersed_args": False}

app = typer.Typer(
    help="Generate EC P-384 signing keys and publish them as JWK sets",
    context_settings=CONTEXT_SETTINGS,
)

# Standalone entry points
gen_app = typer.Typer(add_completion=False, context_settings=CONTEXT_SETTINGS)
build_app = typer.Typer(add_completion=False, context_settings=CONTEXT_SETTINGS)


def _configure(config: Optional[JWKSetConfig] = None) -> JWKSetConfig:
    config = config or load_config()
    logging.basicConfig(
        level=config.log_level, format="%(levelname)s %(name)s: %(message)s"
    )
    return config


def _fail(message: str) -> NoReturn:
    error(label("Error: ", typer.colors.RED) + message)
    raise typer.Exit(code=1)


def gen(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(
        None, help="Name of the key, used as the file name stem"
    ),
    comment: Optional[List[str]] = typer.Argument(
        None, help="Comment written above the key in the file"
    ),
    production: bool = typer.Option(
        False, "--production", "-p", help="Save key for production environment"
    ),
    staging: Optional[bool] = typer.Option(
        None,
        "--staging/--no-staging",
        "-s",
        help="Save key for staging environment (default unless --production is set)",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Force overwrite existing key"),
) -> None:
    """
    Generate a new key pair and save the public key.

    The public JWK is written to <environment>/<name>.jwk.jsonc. The private JWK
    is printed to stdout as a single JSON line and never written to disk; store
    it somewhere safe.

    Example:
        jwkset gen alice
        jwkset gen --production signer-2024 Rotated by ops
    """
    if not name:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    config = _configure()

    try:
        env = resolve_environment(production, staging)
    except EnvironmentSelectionError as exc:
        _fail(str(exc))

    path = key_file_path(config, env, name)
    try:
        overwriting = ensure_writable(path, force)
    except KeyExistsError:
        _fail(f"JWK with name {highlight(name)} already exists. Use --force to overwrite!")

    if overwriting:
        logger.warning("Overwriting existing JWK at %s", path)
        warn_if_terminal(
            label("Warning: ", typer.colors.YELLOW)
            + f"Overwriting existing JWK with name {highlight(name)} (--force is set)\n"
        )

    key = generate_key_pair()

    log_if_terminal("Private Key:", underline=True, bold=True)
    typer.echo(render_private_key(key.private))
    log_if_terminal("DO NOT SHARE WITH ANYONE!!", fg=typer.colors.RED, bold=True, italic=True)

    write_key_file(path, render_key_file(key.public, " ".join(comment or [])))


def build() -> None:
    """
    Build dist/production.json and dist/staging.json from the key files.

    Every *.jwk, *.jwk.json and *.jwk.jsonc file in the environment directory
    is checked. Invalid files are reported and skipped, keys outside their
    iat/exp window are left out.
    """
    config = _configure()

    try:
        results = build_all(config)
    except KeyDirectoryNotFoundError as exc:
        _fail(str(exc))

    for env, result in results.items():
        for invalid in result.invalid:
            error(f"Invalid JWK in file: {invalid.path.name}")
        log_if_terminal(
            f"{env}: {len(result.keyset.keys)} key(s) -> {config.dist_dir / f'{env}.json'}"
        )


gen_app.command(context_settings=GEN_CONTEXT_SETTINGS)(gen)
build_app.command(context_settings=CONTEXT_SETTINGS)(build)
app.command("gen", context_settings=GEN_CONTEXT_SETTINGS)(gen)
app.command("build", context_settings=CONTEXT_SETTINGS)(build)


@app.callback()
def main() -> None:
    """jwkset CLI entry point."""
    pass


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
