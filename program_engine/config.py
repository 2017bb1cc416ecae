"""
Configuration loading: config.yaml merged over built-in defaults.
"""

import copy
import os

import yaml

DEFAULT_CONFIG = {
    "completion": {
        "api_key_env": "ANTHROPIC_API_KEY",
        "model": "claude-sonnet-4-5",
        "max_tokens": 8000,
        "timeout": 120,
        "generation_temperature": 0.7,
    },
    "adaptation": {
        "weekly_temperature": 0.3,
        "daily_temperature": 0.2,
        "weekly_max_tokens": 4000,
        "daily_max_tokens": 2000,
    },
    "guidelines": {
        "file": "guidelines.yaml",
        "max_workers": 4,
    },
    "storage": {
        "db_path": "data/programs.db",
        "save_raw_responses": True,
    },
    "logging": {
        "level": "INFO",
    },
}


def _merge(base, override):
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path="config.yaml"):
    """
    Load configuration from a YAML file.

    A missing file yields the defaults. Sections in the file override the
    matching default keys one by one.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path and os.path.exists(path):
        with open(path, "r") as f:
            _merge(config, yaml.safe_load(f) or {})
    return config


def get_api_key(config):
    env_name = config.get("completion", {}).get("api_key_env") or "ANTHROPIC_API_KEY"
    return os.getenv(env_name)
