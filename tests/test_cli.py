from __future__ import annotations

import logging

import pytest
from click.testing import CliRunner

from phc_hasher.cli import (
    EXIT_HASHING,
    EXIT_INVALID_HASH,
    EXIT_MISMATCH,
    EXIT_SUCCESS,
    EXIT_USAGE,
    PEPPER_ENVVAR,
    _human_memory,
    cli,
    main,
)
from phc_hasher.config import Argon2idConfiguration
from phc_hasher.hasher import hash_password, parse_hash

FAST_ARGS = ["--memory", "64", "--iterations", "1", "--lanes", "1"]


def _hash(runner: CliRunner, *args: str, env: dict[str, str] | None = None) -> str:
    result = runner.invoke(cli, ["hash", "--password", "pw", *FAST_ARGS, *args], env=env)
    assert result.exit_code == EXIT_SUCCESS, result.output
    return result.output.strip()


def test_cli_hash_then_verify() -> None:
    runner = CliRunner()
    encoded = _hash(runner)
    assert encoded.startswith("$argon2id$v=19$m=64,t=1,p=1$")

    result = runner.invoke(cli, ["verify", encoded, "--password", "pw"])
    assert result.exit_code == EXIT_SUCCESS
    assert "matches" in result.output


def test_cli_verify_wrong_password() -> None:
    runner = CliRunner()
    encoded = _hash(runner)

    result = runner.invoke(cli, ["verify", encoded, "--password", "nope"])
    assert result.exit_code == EXIT_MISMATCH
    assert "does not match" in result.output


def test_cli_verify_malformed_hash_is_a_mismatch() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["verify", "$argon2i$v=19$m=64,t=1,p=1$AAAA$AAAA", "--password", "pw"])
    assert result.exit_code == EXIT_MISMATCH


def test_cli_pepper_and_associated_data() -> None:
    runner = CliRunner()
    encoded = _hash(runner, "--pepper", "k", "--associated-data", "ctx")

    ok = runner.invoke(
        cli, ["verify", encoded, "--password", "pw", "--pepper", "k", "--associated-data", "ctx"]
    )
    assert ok.exit_code == EXIT_SUCCESS

    missing = runner.invoke(cli, ["verify", encoded, "--password", "pw", "--associated-data", "ctx"])
    assert missing.exit_code == EXIT_MISMATCH


def test_cli_pepper_from_environment() -> None:
    runner = CliRunner()
    encoded = _hash(runner, env={PEPPER_ENVVAR: "env-pepper"})

    result = runner.invoke(cli, ["verify", encoded, "--password", "pw"], env={PEPPER_ENVVAR: "env-pepper"})
    assert result.exit_code == EXIT_SUCCESS

    result = runner.invoke(cli, ["verify", encoded, "--password", "pw", "--pepper", "other"])
    assert result.exit_code == EXIT_MISMATCH


def test_cli_empty_pepper_is_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["hash", "--password", "pw", "--pepper", "", *FAST_ARGS])
    assert result.exit_code == EXIT_USAGE
    assert "Invalid argument" in result.output


def test_cli_empty_password_is_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["hash", "--password", "", *FAST_ARGS])
    assert result.exit_code == EXIT_USAGE


def test_cli_blank_hash_is_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["verify", "   ", "--password", "pw"])
    assert result.exit_code == EXIT_USAGE


def test_cli_invalid_cost_is_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["hash", "--password", "pw", "--memory", "0"])
    assert result.exit_code == EXIT_USAGE


def test_cli_primitive_failure() -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli, ["hash", "--password", "pw", "--memory", "8", "--iterations", "1", "--lanes", "4"]
    )
    assert result.exit_code == EXIT_HASHING


def test_cli_preset_with_overrides() -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["hash", "--password", "pw", "--preset", "first-recommended", "--memory", "64", "--lanes", "1"],
    )
    assert result.exit_code == EXIT_SUCCESS
    assert parse_hash(result.output.strip()).configuration == Argon2idConfiguration(64, 1, 1)


def test_cli_prompts_for_password(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("phc_hasher.cli.getpass.getpass", lambda prompt: "prompted")
    runner = CliRunner()
    result = runner.invoke(cli, ["hash", *FAST_ARGS])
    assert result.exit_code == EXIT_SUCCESS

    verify = runner.invoke(cli, ["verify", result.output.strip()])
    assert verify.exit_code == EXIT_SUCCESS


def test_cli_inspect() -> None:
    encoded = hash_password("pw", configuration=Argon2idConfiguration(memory=64, iterations=1, lanes=1))
    runner = CliRunner()
    result = runner.invoke(cli, ["inspect", encoded])

    assert result.exit_code == EXIT_SUCCESS
    assert "argon2id" in result.output
    assert "64 KiB" in result.output
    assert "16 bytes" in result.output
    assert "32 bytes" in result.output
    assert "yes" in result.output  # differs from the default preset


def test_cli_inspect_invalid_hash() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["inspect", "$argon2id$v=19$t=1,m=64,p=1$AAAA$AAAA"])
    assert result.exit_code == EXIT_INVALID_HASH
    assert "Not a valid Argon2id hash" in result.output


def test_cli_presets() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["presets"])
    assert result.exit_code == EXIT_SUCCESS
    assert "first-recommended" in result.output
    assert "second-recommended" in result.output
    assert "65536 KiB" in result.output


def test_cli_verbose_enables_debug_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    levels: list[int] = []
    monkeypatch.setattr("phc_hasher.cli.logging.basicConfig", lambda **kwargs: levels.append(kwargs["level"]))

    runner = CliRunner()
    result = runner.invoke(cli, ["--verbose", "verify", "not-a-valid-hash", "--password", "pw"])
    assert result.exit_code == EXIT_MISMATCH
    assert levels == [logging.DEBUG]

    levels.clear()
    runner.invoke(cli, ["presets"])
    assert levels == []


def test_main_returns_exit_codes() -> None:
    assert main(["presets"]) == EXIT_SUCCESS
    assert main(["inspect", "garbage"]) == EXIT_INVALID_HASH
    assert main(["hash", "--unknown-option"]) == EXIT_USAGE


def test_help_commands_run() -> None:
    runner = CliRunner()
    assert runner.invoke(cli, ["--help"]).exit_code == 0
    assert runner.invoke(cli, ["hash", "--help"]).exit_code == 0
    assert runner.invoke(cli, ["verify", "--help"]).exit_code == 0


def test_cli_undecodable_password_is_usage_error(fast_config: Argon2idConfiguration) -> None:
    encoded = hash_password("pw", configuration=fast_config)
    runner = CliRunner()
    result = runner.invoke(cli, ["verify", encoded, "--password", "\udcff"])
    assert result.exit_code == EXIT_USAGE
    assert "Invalid argument" in result.output


@pytest.mark.parametrize("interrupt", [KeyboardInterrupt, EOFError])
def test_main_handles_interrupted_prompt(monkeypatch: pytest.MonkeyPatch, interrupt: type[BaseException]) -> None:
    def _raise(prompt: str) -> str:
        raise interrupt()

    monkeypatch.setattr("phc_hasher.cli.getpass.getpass", _raise)
    assert main(["hash", *FAST_ARGS]) == EXIT_USAGE


@pytest.mark.parametrize(
    ("kib", "expected"),
    [(64, "64 KiB"), (65536, "65536 KiB (64 MiB)"), (2097152, "2097152 KiB (2 GiB)")],
)
def test_human_memory(kib: int, expected: str) -> None:
    assert _human_memory(kib) == expected
