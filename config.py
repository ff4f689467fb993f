import json
import os
from pathlib import Path

import yaml

DEFAULTS = {
    "log_level": "INFO",
    # Used when a USD stage has several top level prims.
    "scene_root_name": "Root",
    "scene_root_type": "Node3D",
}

ENV_PREFIX = "GODOT_USD_"


def load_config(path):
    """Load a JSON or YAML configuration file."""
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        if path.suffix in [".yaml", ".yml"]:
            data = yaml.safe_load(f)
        elif path.suffix == ".json":
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")

    return data or {}


def get_env_config():
    config = {}
    for key in DEFAULTS:
        value = os.environ.get(ENV_PREFIX + key.upper())
        if value:
            config[key] = value
    return config


def resolve_config(path=None):
    """Defaults, then the config file, then the environment."""
    config = dict(DEFAULTS)
    if path:
        config.update(load_config(path))
    config.update(get_env_config())
    return config
