"""Command line interface for phc-hasher."""

from __future__ import annotations

import getpass
import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Callable

import click
from rich.console import Console
from rich.table import Table

from phc_hasher import __version__
from phc_hasher.config import (
    DEFAULT_CONFIGURATION,
    DEFAULT_PRESET_NAME,
    PRESETS,
    get_preset,
    resolve_configuration,
)
from phc_hasher.errors import HashingError, InvalidArgumentError, InvalidHashError
from phc_hasher.hasher import ALGORITHM_NAME, hash_password, needs_rehash, parse_hash, verify_password

EXIT_SUCCESS = 0
EXIT_USAGE = 1
EXIT_MISMATCH = 2
EXIT_HASHING = 3
EXIT_INVALID_HASH = 4

PEPPER_ENVVAR = "PHC_HASHER_PEPPER"

console = Console()


def _package_version() -> str:
    try:
        return version("phc-hasher")
    except PackageNotFoundError:
        return __version__


def _prompt_password(password_opt: str | None) -> str:
    if password_opt is not None:
        return password_opt
    return getpass.getpass("Password: ")


def _human_memory(kib: int) -> str:
    if kib < 1024:
        return f"{kib} KiB"
    size = kib / 1024
    unit = "MiB"
    if size >= 1024:
        size /= 1024
        unit = "GiB"
    return f"{kib} KiB ({size:g} {unit})"


def _handle_action(action: Callable[[], None]) -> int:
    try:
        action()
    except InvalidArgumentError as exc:
        console.print(f"[red]Invalid argument:[/red] {exc}")
        return EXIT_USAGE
    except InvalidHashError as exc:
        console.print(f"[red]Not a valid Argon2id hash:[/red] {exc}")
        return EXIT_INVALID_HASH
    except HashingError as exc:
        console.print(f"[red]Argon2id failed:[/red] {exc}")
        return EXIT_HASHING
    return EXIT_SUCCESS


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=False,
)
@click.version_option(version=_package_version(), prog_name="phc-hasher")
@click.option("--verbose/--quiet", default=False, help="Log debug details to stderr.")
def cli(verbose: bool) -> None:
    """Hash and verify passwords with Argon2id PHC strings."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command(
    "hash",
    help="Hash a password and print the PHC string.",
    epilog="Examples:\n  phc-hasher hash\n  phc-hasher hash --preset first-recommended\n  phc-hasher hash --memory 19456 --iterations 2 --lanes 1",
)
@click.option("--password", "password_opt", help="Password to hash (will prompt if omitted).")
@click.option("--pepper", envvar=PEPPER_ENVVAR, default=None, help=f"Application secret (or set {PEPPER_ENVVAR}).")
@click.option("--associated-data", default=None, help="Context string bound into the hash.")
@click.option(
    "--preset",
    type=click.Choice(sorted(PRESETS), case_sensitive=False),
    default=DEFAULT_PRESET_NAME,
    show_default=True,
    help="Named cost profile.",
)
@click.option("--memory", type=int, default=None, help="Memory cost in KiB (overrides the preset).")
@click.option("--iterations", type=int, default=None, help="Time cost (overrides the preset).")
@click.option("--lanes", type=int, default=None, help="Parallelism (overrides the preset).")
@click.pass_context
def hash_command(
    ctx: click.Context,
    password_opt: str | None,
    pepper: str | None,
    associated_data: str | None,
    preset: str,
    memory: int | None,
    iterations: int | None,
    lanes: int | None,
) -> None:
    password = _prompt_password(password_opt)
    result: dict[str, str] = {}

    def _run() -> None:
        configuration = resolve_configuration(
            memory=memory,
            iterations=iterations,
            lanes=lanes,
            base=get_preset(preset),
        )
        result["hash"] = hash_password(password, pepper, associated_data, configuration)

    code = _handle_action(_run)
    if code == EXIT_SUCCESS:
        click.echo(result["hash"])
    ctx.exit(code)


@cli.command(
    help="Check a password against a PHC string.",
    epilog="Example:\n  phc-hasher verify '$argon2id$v=19$m=65536,t=3,p=4$...$...'",
)
@click.argument("encoded")
@click.option("--password", "password_opt", help="Password to check (will prompt if omitted).")
@click.option("--pepper", envvar=PEPPER_ENVVAR, default=None, help=f"Application secret (or set {PEPPER_ENVVAR}).")
@click.option("--associated-data", default=None, help="Context string used when hashing.")
@click.pass_context
def verify(
    ctx: click.Context,
    encoded: str,
    password_opt: str | None,
    pepper: str | None,
    associated_data: str | None,
) -> None:
    password = _prompt_password(password_opt)
    result: dict[str, bool] = {}

    def _run() -> None:
        result["match"] = verify_password(password, encoded, pepper, associated_data)

    code = _handle_action(_run)
    if code != EXIT_SUCCESS:
        ctx.exit(code)
        return

    if result["match"]:
        console.print("[green]Password matches.[/green]")
        ctx.exit(EXIT_SUCCESS)
    else:
        console.print("[red]Password does not match.[/red]")
        ctx.exit(EXIT_MISMATCH)


@cli.command(
    help="Show the parameters stored in a PHC string without verifying it.",
    epilog="Example:\n  phc-hasher inspect '$argon2id$v=19$m=65536,t=3,p=4$...$...'",
)
@click.argument("encoded")
@click.pass_context
def inspect(ctx: click.Context, encoded: str) -> None:
    def _run() -> None:
        parsed = parse_hash(encoded)
        configuration = parsed.configuration
        table = Table(show_header=False, box=None)
        table.add_row("Algorithm", ALGORITHM_NAME)
        table.add_row("Version", str(parsed.version))
        table.add_row("Memory", _human_memory(configuration.memory))
        table.add_row("Iterations", str(configuration.iterations))
        table.add_row("Lanes", str(configuration.lanes))
        table.add_row("Salt", f"{len(parsed.salt)} bytes")
        table.add_row("Tag", f"{len(parsed.tag)} bytes")
        table.add_row("Needs rehash", "yes" if needs_rehash(encoded) else "no")

        console.print("[bold]Argon2id hash[/bold]")
        console.print(table)

    ctx.exit(_handle_action(_run))


@cli.command(help="List the named cost presets.")
@click.pass_context
def presets(ctx: click.Context) -> None:
    table = Table(title="Argon2id presets")
    table.add_column("Name")
    table.add_column("Memory")
    table.add_column("Iterations", justify="right")
    table.add_column("Lanes", justify="right")
    for name, configuration in sorted(PRESETS.items()):
        label = f"{name} (default)" if configuration == DEFAULT_CONFIGURATION else name
        table.add_row(
            label,
            _human_memory(configuration.memory),
            str(configuration.iterations),
            str(configuration.lanes),
        )
    console.print(table)
    ctx.exit(EXIT_SUCCESS)


def main(argv: list[str] | None = None) -> int:
    try:
        return cli.main(args=argv, prog_name="phc-hasher", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return EXIT_USAGE
    except click.Abort:
        click.echo("Aborted!", err=True)
        return EXIT_USAGE
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else EXIT_USAGE
        return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
