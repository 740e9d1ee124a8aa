import json
from pathlib import Path
from typing import Optional, Type, TypeVar

import yaml
from dotenv import load_dotenv
from instrukt_ai_logging import get_logger
from pydantic import BaseModel, ValidationError

from rigsweep.config.schema import RigsRegistry, RigsweepConfig
from rigsweep.constants import CONFIG_FILE, MAYOR_DIR, RIGS_CONFIG_FILE
from rigsweep.core.errors import ConfigError
from rigsweep.utils import expand_env_vars

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if hasattr(model, "model_extra") and model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))

    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)
        elif isinstance(field_value, dict):
            for key, value in field_value.items():
                if isinstance(value, BaseModel):
                    _warn_unknown_keys(value, f"{path}.{field_name}.{key}", config_path)


def _validate(raw: object, model_class: Type[T], path: Path) -> T:
    try:
        model = model_class.model_validate(expand_env_vars(raw))
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e
    _warn_unknown_keys(model, "root", path)
    return model


def load_config(path: Path, model_class: Type[T]) -> T:
    """Load and validate configuration from a YAML file.

    A missing file yields the model defaults; an unreadable or invalid file
    raises ConfigError.
    """
    if not path.exists():
        return model_class()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    return _validate(raw, model_class, path)


def load_rigsweep_config(town_root: Path, path: Optional[Path] = None) -> RigsweepConfig:
    """Load rigsweep.yml, defaulting to <town>/mayor/rigsweep.yml.

    Variables from <town>/.env are made available for ${VAR} expansion
    without overriding the process environment.
    """
    load_dotenv(town_root / ".env", override=False)
    if path is None:
        path = town_root / MAYOR_DIR / CONFIG_FILE
    elif not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    return load_config(path, RigsweepConfig)


def load_rigs_registry(town_root: Path) -> RigsRegistry:
    """Load mayor/rigs.json. A town without one has no registered rigs."""
    path = town_root / MAYOR_DIR / RIGS_CONFIG_FILE
    if not path.exists():
        logger.debug("No rig registry at %s", path)
        return RigsRegistry()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read rig registry {path}: {e}") from e

    return _validate(raw, RigsRegistry, path)
