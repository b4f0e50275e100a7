"""Gateway config file: YAML with ``$VAR`` placeholders filled from a .env file."""

import logging
import os
import re
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dotenv import dotenv_values

logger = logging.getLogger("proxy-transfer")

DEFAULT_CONFIG_PATH = "configs/config_default.yaml"
CONFIG_PATH_ENV = "PROXY_TRANSFER_CONFIG"

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ${NAME} or $NAME
_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def default_config_path() -> str:
    return os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH


def resolve_config_path(path: str) -> Path:
    """Relative paths are taken from the checkout root, not the cwd."""
    candidate = Path(path)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def resolve_env_path(config_path: Path, env_path: Optional[str] = None) -> Path:
    """Pick the .env file paired with ``config_path``.

    ``configs/config_local.yaml`` pairs with ``configs/.env_local``; any other
    name pairs with a plain ``.env`` next to it.
    """
    if env_path:
        return resolve_config_path(env_path)
    suffix = config_path.stem.removeprefix("config_")
    if suffix != config_path.stem:
        return config_path.with_name(f".env_{suffix}")
    return config_path.with_name(".env")


def load_env_values(env_path: Path) -> dict[str, str]:
    """Read ``env_path`` without exporting anything into ``os.environ``."""
    if not env_path.exists():
        return {}
    return {name: value for name, value in dotenv_values(env_path).items() if value is not None}


def load_config(
    path: Optional[str] = None,
    env_path: Optional[str] = None,
    substitute_env: bool = True,
) -> dict:
    """Read the gateway config file.

    Args:
        path: Config file; ``PROXY_TRANSFER_CONFIG`` or the bundled default
            when omitted.
        env_path: .env file to fill placeholders from, overriding the
            paired one.
        substitute_env: Leave ``$VAR`` placeholders untouched when False.

    Returns:
        The parsed mapping, or ``{}`` when the file is missing, empty or not
        a mapping. ``load_settings`` supplies defaults for anything absent.
    """
    config_path = resolve_config_path(path or default_config_path())
    if not config_path.exists():
        logger.warning(f"No config file at {config_path}; running on defaults")
        return {}

    with config_path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {config_path}: top level is {type(data).__name__}, not a mapping")
        return {}

    if substitute_env:
        env_file = resolve_env_path(config_path, env_path)
        env_values = load_env_values(env_file)
        if env_values:
            logger.info(f"Filling config placeholders from {env_file}")
        data = _substitute_env_vars(data, env_values)

    logger.info(f"Using config file {config_path}")
    return data


def _substitute_env_vars(obj: Any, env_values: Optional[Mapping[str, str]] = None) -> Any:
    """Fill placeholders in every string of ``obj``.

    .env values take precedence over the process environment. A name found
    in neither is left as written and reported.
    """
    env_values = env_values or {}

    def lookup(match: re.Match) -> str:
        name = match.group(1) or match.group(2)
        value = env_values.get(name, os.getenv(name))
        if value is None:
            logger.warning(f"Config placeholder '{match.group(0)}' has no value; kept as is")
            return match.group(0)
        return value

    def walk(node: Any) -> Any:
        if isinstance(node, dict):
            return {key: walk(value) for key, value in node.items()}
        if isinstance(node, list):
            return [walk(item) for item in node]
        if isinstance(node, str):
            return _ENV_PATTERN.sub(lookup, node)
        return node

    return walk(obj)
