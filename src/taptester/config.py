from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import msgspec

from .errors import TesterError

# Environment variable names
ENV_COLOR = "TAPTESTER_COLOR"
ENV_NO_COLOR = "NO_COLOR"

PYPROJECT_NAME = "pyproject.toml"
TOOL_TABLE = "taptester"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


class ConfigError(TesterError):
    pass


class TaptesterSettings(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    color: bool = False
    color_system: Literal["standard", "256", "truecolor"] = "standard"
    prefix_style: str = "green"
    divergence_style: str = "red"
    no_color: bool = False


def _read_config(cfg_path: Path) -> dict:
    try:
        raw = cfg_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Missing config file {cfg_path}.") from None
    except OSError as e:
        raise ConfigError(f"Failed to read config file {cfg_path}: {e}") from e
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {e}") from None


def _tool_table(config: dict, cfg_path: Path) -> dict:
    tool = config.get("tool")
    if not isinstance(tool, dict):
        return {} if cfg_path.name == PYPROJECT_NAME else config
    if TOOL_TABLE not in tool:
        return {}
    table = tool[TOOL_TABLE]
    if not isinstance(table, dict):
        raise ConfigError(
            f"Invalid `tool.{TOOL_TABLE}` in {cfg_path}; expected a table."
        )
    return table


def _parse_flag(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(
        f"Invalid {name} environment variable; expected one of "
        f"{', '.join(sorted(_TRUTHY | _FALSY))}."
    )


def load_settings(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> TaptesterSettings:
    """Resolve settings from ``[tool.taptester]`` and the environment.

    An explicit ``path`` must exist; without one, ``pyproject.toml`` in the
    working directory is read when present. ``TAPTESTER_COLOR`` overrides the
    file and a non-empty ``NO_COLOR`` disables color rendering.
    """
    env = os.environ if environ is None else environ

    data: dict[str, Any] = {}
    if path:
        cfg_path = Path(path).expanduser()
        data = dict(_tool_table(_read_config(cfg_path), cfg_path))
    else:
        cfg_path = Path.cwd() / PYPROJECT_NAME
        if cfg_path.is_file():
            data = dict(_tool_table(_read_config(cfg_path), cfg_path))

    env_color = env.get(ENV_COLOR)
    if env_color and env_color.strip():
        data["color"] = _parse_flag(ENV_COLOR, env_color)
    if env.get(ENV_NO_COLOR):
        data["no_color"] = True

    try:
        return msgspec.convert(data, type=TaptesterSettings)
    except msgspec.ValidationError as e:
        raise ConfigError(f"Invalid taptester settings in {cfg_path}: {e}") from None
