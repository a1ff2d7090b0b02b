"""Map configuration loading from TOML files."""

import tomllib
from pathlib import Path

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .terrain.config import MapConfig

CONFIGS_DIR = Path(__file__).parent.parent.parent / "configs"


def load_config(config_path: Path) -> MapConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed MapConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the TOML is malformed or fails validation.
    """
    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config {config_path}: {e}") from e

    try:
        return MapConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}: {e}") from e


def find_config(name: str) -> Path:
    """Find a config file by name.

    Searches in the following order:
    1. Exact path if name contains path separator or ends in .toml
    2. configs/{name}.toml
    3. configs/{name}

    Args:
        name: Config name or path.

    Returns:
        Path to the config file.

    Raises:
        FileNotFoundError: If config file is not found.
    """
    # If it looks like a path, use it directly
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {name}")

    config_path = CONFIGS_DIR / f"{name}.toml"
    if config_path.exists():
        return config_path

    config_path = CONFIGS_DIR / name
    if config_path.exists():
        return config_path

    raise FileNotFoundError(
        f"Config '{name}' not found in {CONFIGS_DIR}. "
        f"Available configs: {list_configs()}"
    )


def list_configs() -> list[str]:
    """List available config names."""
    if not CONFIGS_DIR.exists():
        return []
    return sorted(p.stem for p in CONFIGS_DIR.glob("*.toml"))
