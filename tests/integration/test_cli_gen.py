from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from jwkset import console
from jwkset.cli import app, gen_app
from jwkset.jwk import load_jwk_text, validate_jwk


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("JWKSET_CONFIG", raising=False)
    monkeypatch.delenv("JWKSET_BASE_DIR", raising=False)
    return tmp_path


def test_gen_writes_public_key_to_staging_by_default(workdir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["gen", "alice", "Laptop", "key"])

    assert result.exit_code == 0, result.output
    path = workdir / "staging" / "alice.jwk.jsonc"
    text = path.read_text(encoding="utf-8")
    assert text.startswith("// Laptop key\n")
    public = load_jwk_text(text)
    assert validate_jwk(public)
    assert "iat" in public
    assert not (workdir / "production").exists()


def test_gen_prints_only_private_key_when_not_a_terminal(workdir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(gen_app, ["bob"])

    assert result.exit_code == 0, result.output
    lines = result.stdout.strip().splitlines()
    assert len(lines) == 1
    private = json.loads(lines[0])
    assert validate_jwk(private, private=True)
    assert "DO NOT SHARE" not in result.output

    public = load_jwk_text((workdir / "staging" / "bob.jwk.jsonc").read_text())
    assert "d" not in public
    assert public["kid"] == private["kid"]


def test_gen_shows_warning_on_terminal(workdir: Path, monkeypatch) -> None:
    monkeypatch.setattr(console, "is_terminal", lambda: True)
    runner = CliRunner()
    result = runner.invoke(app, ["gen", "carol"])

    assert result.exit_code == 0, result.output
    assert "Private Key:" in result.stdout
    assert "DO NOT SHARE WITH ANYONE!!" in result.stdout


def test_gen_production_flag(workdir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["gen", "--production", "signer"])

    assert result.exit_code == 0, result.output
    assert (workdir / "production" / "signer.jwk.jsonc").exists()
    assert not (workdir / "staging" / "signer.jwk.jsonc").exists()


def test_gen_rejects_ambiguous_environment(workdir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["gen", "-p", "-s", "signer"])

    assert result.exit_code == 1
    assert "only one" in result.stderr
    assert not (workdir / "production").exists()
    assert not (workdir / "staging").exists()


def test_gen_requires_an_environment(workdir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["gen", "--no-staging", "signer"])

    assert result.exit_code == 1
    assert "Please specify either --production or --staging" in result.stderr


def test_gen_without_name_prints_usage(workdir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(gen_app, [])

    assert result.exit_code == 1
    assert "Usage" in result.stdout
    assert "--production" in result.stdout
    assert list(workdir.iterdir()) == []


def test_gen_refuses_to_overwrite(workdir: Path) -> None:
    existing = workdir / "staging" / "alice.jwk.jsonc"
    existing.parent.mkdir()
    existing.write_text("// keep me\n{}\n")

    runner = CliRunner()
    result = runner.invoke(app, ["gen", "alice"])

    assert result.exit_code == 1
    assert "already exists. Use --force to overwrite!" in result.stderr
    assert result.stdout == ""
    assert existing.read_text() == "// keep me\n{}\n"


def test_gen_force_overwrites_with_warning(workdir: Path, monkeypatch) -> None:
    monkeypatch.setattr(console, "is_terminal", lambda: True)
    existing = workdir / "staging" / "alice.jwk.jsonc"
    existing.parent.mkdir()
    existing.write_text("{}\n")

    runner = CliRunner()
    result = runner.invoke(app, ["gen", "--force", "alice"])

    assert result.exit_code == 0, result.output
    assert "Overwriting existing JWK with name alice" in result.stderr
    assert validate_jwk(load_jwk_text(existing.read_text()))


def test_gen_treats_words_after_name_as_comment(workdir: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["gen", "dave", "rotated", "-f", "--by", "ops"])

    assert result.exit_code == 0, result.output
    text = (workdir / "staging" / "dave.jwk.jsonc").read_text()
    assert text.startswith("// rotated -f --by ops\n")


def test_gen_options_after_name_do_not_force(workdir: Path) -> None:
    existing = workdir / "staging" / "erin.jwk.jsonc"
    existing.parent.mkdir()
    existing.write_text("{}\n")

    result = CliRunner().invoke(app, ["gen", "erin", "-f"])

    assert result.exit_code == 1
    assert existing.read_text() == "{}\n"


def test_gen_existence_check_errors_are_fatal(workdir: Path, monkeypatch) -> None:
    original = Path.lstat

    def lstat(self, *args, **kwargs):
        if self.name.endswith(".jwk.jsonc"):
            raise PermissionError(13, "Permission denied", str(self))
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Path, "lstat", lstat)

    result = CliRunner().invoke(app, ["gen", "frank"])

    assert result.exit_code != 0
    assert isinstance(result.exception, PermissionError)
    assert result.stdout == ""
    assert not (workdir / "staging" / "frank.jwk.jsonc").exists()


def test_gen_production_with_no_staging(workdir: Path) -> None:
    result = CliRunner().invoke(app, ["gen", "-p", "--no-staging", "grace"])

    assert result.exit_code == 0, result.output
    assert (workdir / "production" / "grace.jwk.jsonc").exists()
