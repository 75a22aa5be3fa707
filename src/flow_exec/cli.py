"""Click entry point — all commands."""

import sys

import click
import yaml

from flow_exec import __version__, exe, log, platforms, process
from flow_exec import config as config_mod

_env_option = click.option(
    "--env", "env", multiple=True, metavar="KEY=VALUE", help="Extra environment variable"
)
_cwd_option = click.option(
    "--cwd", default=None, type=click.Path(file_okay=False), help="Working directory"
)


def _build_args(command: tuple[str, ...], split: bool) -> list[str]:
    if split:
        return process.split_command(" ".join(command))
    return list(command)


def _echo_result(result: process.Result) -> None:
    if result.stdout:
        click.echo(result.stdout, nl=False)
    if result.stderr:
        click.echo(result.stderr, nl=False, err=True)


@click.group()
@click.version_option(version=__version__, prog_name="flow-exec")
def main():
    """Run commands and capture their output."""


@main.command(context_settings={"ignore_unknown_options": True})
@_env_option
@_cwd_option
@click.option("--split", is_flag=True, help="Tokenize the command on whitespace")
@click.option(
    "--check",
    is_flag=True,
    help="Also log a non-zero exit as a failure (exit code is unchanged)",
)
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def run(env, cwd, split, check, command):
    """Run a command and wait for it, echoing its captured output.

    Exits with the command's exit code. --check only adds a failure line.
    """
    try:
        result = process.run(
            _build_args(command, split), env=process.parse_env(env) or None, cwd=cwd
        )
    except (process.RunError, ValueError) as e:
        log.error(str(e))
        sys.exit(1)

    _echo_result(result)
    if check:
        try:
            result.ensure_ok()
        except process.CommandFailedError as e:
            log.failure(f"{command[0]} exited with {e.returncode}")
    sys.exit(result.returncode)


@main.command(context_settings={"ignore_unknown_options": True})
@_env_option
@_cwd_option
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
def spawn(env, cwd, command):
    """Start a command in the background without waiting for it.

    Its output is discarded: flow-exec exits right away and cannot read it.
    """
    try:
        process.run_async(
            list(command), env=process.parse_env(env) or None, cwd=cwd, capture=False
        )
    except (process.RunError, ValueError) as e:
        log.error(str(e))
        sys.exit(1)


@main.command()
@click.argument("directory", type=click.Path(file_okay=False))
@click.argument("name")
def which(directory, name):
    """Find NAME, NAME.exe or NAME.bat in DIRECTORY."""
    found = exe.find_exe(directory, name)
    if found is None:
        log.error(f"No executable '{name}' in {directory}")
        sys.exit(1)
    click.echo(str(found))


@main.command()
def platform():
    """Print the platform tag of this host."""
    click.echo(platforms.determine_platform())


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def batch(file):
    """Run the commands listed in a YAML batch FILE, in order."""
    try:
        commands = config_mod.load_file(file)
    except (yaml.YAMLError, ValueError) as e:
        log.error(f"Invalid batch file {file}: {e}")
        sys.exit(1)

    for cmd in commands:
        log.header(cmd.name)
        try:
            if cmd.background:
                process.run_async(cmd.args, env=cmd.env or None, cwd=cmd.cwd, capture=False)
                log.success("started in background")
                log.footer(cmd.name)
                continue
            result = process.run(cmd.args, env=cmd.env or None, cwd=cmd.cwd)
        except process.RunError as e:
            log.error(str(e))
            log.footer(cmd.name)
            sys.exit(1)

        _echo_result(result)
        if result.returncode == 0:
            log.success(f"exited with {result.returncode}")
        else:
            log.failure(f"exited with {result.returncode}")
        log.footer(cmd.name)

        if cmd.check and result.returncode != 0:
            sys.exit(result.returncode)


if __name__ == "__main__":
    main()
