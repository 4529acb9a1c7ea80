"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from nodecalc._editor import PortPolicy
from nodecalc._eval_engine import DEFAULT_MAX_PASSES
from nodecalc._history import DEFAULT_HISTORY_LIMIT


class ConfigError(Exception):
    """Error in nodecalc configuration."""


@dataclass(slots=True, frozen=True)
class NodecalcConfig:
    """Configuration loaded from the [tool.nodecalc] table of pyproject.toml."""

    max_passes: int = DEFAULT_MAX_PASSES
    history_limit: int = DEFAULT_HISTORY_LIMIT
    port_policy: PortPolicy = PortPolicy.APPEND
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _parse_int(section: dict[str, object], key: str, default: int, minimum: int) -> int:
    if key not in section:
        return default
    value = section[key]
    # bool is an int subclass but never a meaningful count
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"Invalid [tool.nodecalc].{key}: expected integer"
        raise ConfigError(msg)
    if value < minimum:
        msg = f"Invalid [tool.nodecalc].{key}: must be at least {minimum}, got {value}"
        raise ConfigError(msg)
    return value


def _parse_port_policy(section: dict[str, object]) -> PortPolicy:
    if "port_policy" not in section:
        return PortPolicy.APPEND
    value = section["port_policy"]
    try:
        return PortPolicy(value)
    except ValueError:
        choices = ", ".join(f"'{policy}'" for policy in PortPolicy)
        msg = f"Invalid [tool.nodecalc].port_policy {value!r}. Expected one of {choices}"
        raise ConfigError(msg) from None


def load_config(pyproject_path: Path) -> NodecalcConfig:
    """Load and validate [tool.nodecalc] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed NodecalcConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("nodecalc", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.nodecalc] configuration. Expected a table."
        raise ConfigError(msg)

    return NodecalcConfig(
        max_passes=_parse_int(section, "max_passes", DEFAULT_MAX_PASSES, minimum=1),
        history_limit=_parse_int(section, "history_limit", DEFAULT_HISTORY_LIMIT, minimum=0),
        port_policy=_parse_port_policy(section),
        project_root=project_root,
    )


def get_config() -> NodecalcConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        NodecalcConfig (defaults if no pyproject.toml or no [tool.nodecalc] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return NodecalcConfig()
    return load_config(pyproject_path)
