#!/usr/bin/env python3

import os
import json
import getpass
import tomllib
from pathlib import Path

import logging
import sys

import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("xbrew")


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. XBREW_CONFIG environment variable
    2. ~/.xbrew/ directory
    """
    if 'XBREW_CONFIG' in os.environ:
        path = Path(os.environ['XBREW_CONFIG'])
        if path.exists():
            return path

    xbrew_dir = Path.home() / '.xbrew'
    for filename in ['config.json', 'config.toml', 'config.yaml', 'config.yml']:
        path = xbrew_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path for saving
    return xbrew_dir / 'config.json'


def default_tap(user=None):
    """Name of the tap used when none is given: '<user>/local'."""
    if not user:
        try:
            user = getpass.getuser()
        except (KeyError, OSError):
            user = os.environ.get('USER') or 'xbrew'
    return f"{user}/local"


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "default_tap": "",  # Empty means '<user>/local'
        },
        "source": {
            "repo_root": "https://raw.githubusercontent.com/Homebrew/homebrew-core",
            "formula_dir": "Formula",
            "extension": ".rb"
        },
        "network": {
            "probe_retries": 2,
            "probe_retry_delay": 1,
            "probe_timeout": 10,
            "download_retries": 3,
            "download_retry_delay": 2,
            "download_timeout": 60
        },
        "git": {
            "fallback_user_name": "xbrew",
            "fallback_user_email": "xbrew@local",
            "timeout": 30
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        }
    }


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                # Default to JSON format
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            # Merge file config with defaults
            config = merge_configs(config, file_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    if not config["general"].get("default_tap"):
        config["general"]["default_tap"] = default_tap()

    return config


def configure_logging(config):
    """Apply the logging section of the config to the root logger."""
    log_config = config.get("logging", {})
    level = str(log_config.get("level", "INFO")).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    fmt = log_config.get("format")
    if fmt:
        for handler in root.handlers:
            handler.setFormatter(logging.Formatter(fmt))


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: XBREW_SECTION_KEY
    For example: XBREW_NETWORK_DOWNLOAD_TIMEOUT=120
    """
    env_prefix = "XBREW_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "XBREW_CONFIG":
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config
