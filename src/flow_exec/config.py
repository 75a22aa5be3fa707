"""Parse batch YAML files into CommandConfig objects."""

from dataclasses import dataclass, field

import yaml

from flow_exec.process import split_command


@dataclass
class CommandConfig:
    name: str
    args: list[str]
    env: dict[str, str] = field(default_factory=dict)
    cwd: str | None = None
    check: bool = False
    background: bool = False


def _require_mapping(value, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _parse_x_exec(doc: dict) -> dict:
    """Extract x-exec top-level defaults."""
    return _require_mapping(doc.get("x-exec"), "x-exec")


def _parse_args(name: str, command) -> list[str]:
    if isinstance(command, str):
        args = split_command(command)
    elif isinstance(command, list):
        args = [str(a) for a in command]
    else:
        args = []
    if not args:
        raise ValueError(f"Command '{name}' has no command to run")
    return args


def _stringify_env(env, what: str) -> dict[str, str]:
    return {str(k): str(v) for k, v in _require_mapping(env, what).items()}


def parse_commands(doc: dict | None) -> list[CommandConfig]:
    """Parse a batch document into CommandConfig list, in file order.

    Per-command env is merged over x-exec env; cwd and check fall back to
    the x-exec values.
    """
    doc = _require_mapping(doc, "Batch document")
    defaults = _parse_x_exec(doc)
    default_env = _stringify_env(defaults.get("env"), "x-exec env")
    configs = []

    for name, entry in _require_mapping(doc.get("commands"), "commands").items():
        name = str(name)
        if isinstance(entry, (str, list)):
            entry = {"command": entry}
        elif not isinstance(entry, dict):
            raise ValueError(f"Command '{name}' must be a string, list or mapping")

        configs.append(
            CommandConfig(
                name=name,
                args=_parse_args(name, entry.get("command")),
                env={**default_env, **_stringify_env(entry.get("env"), f"Command '{name}' env")},
                cwd=entry.get("cwd", defaults.get("cwd")),
                check=bool(entry.get("check", defaults.get("check", False))),
                background=bool(entry.get("background", False)),
            )
        )

    return configs


def load_file(path: str) -> list[CommandConfig]:
    with open(path) as f:
        return parse_commands(yaml.safe_load(f))
