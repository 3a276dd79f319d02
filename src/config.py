# Shapekit
# Copyright 2025 - Ricardo Quesada

import logging
from dataclasses import asdict, dataclass, fields

import toml

logger = logging.getLogger(__name__)

# Margin around a shape where connectors can still bind to it
BINDING_DISTANCE = 16.0


@dataclass
class ShapeConfig:
    binding_distance: float = BINDING_DISTANCE
    min_shape_size: float = 1.0
    default_stroke: str = "#000000"
    default_fill: str = "#ffffff"


def load_config(filename: str) -> ShapeConfig:
    """Loads a ShapeConfig from the [shapes] table of a TOML file.

    Missing keys keep their default value. A missing or invalid file
    returns the defaults.
    """
    logger.info(f"Loading shape config from {filename}")
    config = ShapeConfig()
    try:
        with open(filename, "r", encoding="utf-8") as f:
            d = toml.load(f)
    except FileNotFoundError as e:
        logger.warning(f"Config file {filename} not found, using defaults: {e}")
        return config
    except toml.TomlDecodeError as e:
        logger.error(f"Invalid config file {filename}: {e}")
        return config

    data = asdict(config)
    known = {f.name for f in fields(ShapeConfig)}
    for key, value in d.get("shapes", {}).items():
        if key not in known:
            logger.warning(f"Unknown config key '{key}' in {filename}")
            continue
        data[key] = value

    if data["binding_distance"] < 0:
        logger.error(f"Invalid binding_distance {data['binding_distance']}, using default")
        data["binding_distance"] = BINDING_DISTANCE
    if data["min_shape_size"] < 0:
        logger.error(f"Invalid min_shape_size {data['min_shape_size']}, using default")
        data["min_shape_size"] = ShapeConfig.min_shape_size

    return ShapeConfig(**data)


_global_config = None


def get_global_config() -> ShapeConfig:
    global _global_config
    if _global_config is None:
        _global_config = ShapeConfig()
    return _global_config


def set_global_config(config: ShapeConfig | None) -> None:
    """Replaces the global config. Passing None restores the defaults lazily."""
    global _global_config
    _global_config = config
