"""Utility module for loading detector options from YAML files."""
import os
import yaml
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from core.cache import CacheInterface


@dataclass
class DetectorOptions:
    """Options recognized by DeviceDetector.

    client_parsers / device_parsers hold parser names or parser instances in
    chain order; None means the built-in chain.
    """
    discard_bot_details: bool = False
    skip_bot_detection: bool = False
    cache: Optional[CacheInterface] = None
    client_parsers: Optional[Sequence[Any]] = None
    device_parsers: Optional[Sequence[Any]] = None
    rules_dir: Optional[str] = None


def load_config(config_file: str) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_file: Path to the YAML configuration file

    Returns:
        Dictionary containing the configuration data, empty if the file does not exist
    """
    if not os.path.exists(config_file):
        return {}

    with open(config_file, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {config_file} must be a mapping")
        return data


def load_detector_options(config_file: str) -> DetectorOptions:
    """
    Build DetectorOptions from a YAML file such as:

        discard_bot_details: true
        client_parsers: [browser, mobile app]
        device_parsers: [mobile]
        rules_dir: /etc/device-detector/rules

    Unknown keys are rejected so typos do not go unnoticed.
    """
    config = load_config(config_file)
    allowed = {"discard_bot_details", "skip_bot_detection", "client_parsers", "device_parsers", "rules_dir"}
    unknown = set(config) - allowed
    if unknown:
        raise ValueError(f"Unknown option(s) in {config_file}: {', '.join(sorted(unknown))}")

    for key in ("client_parsers", "device_parsers"):
        if config.get(key) is not None and not isinstance(config[key], list):
            raise ValueError(f"'{key}' in {config_file} must be a list of parser names")

    return DetectorOptions(
        discard_bot_details=bool(config.get("discard_bot_details", False)),
        skip_bot_detection=bool(config.get("skip_bot_detection", False)),
        client_parsers=config.get("client_parsers"),
        device_parsers=config.get("device_parsers"),
        rules_dir=config.get("rules_dir"),
    )
