"""Optional YAML configuration for profile generation."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger("seccompscan")

FALLBACK_DEFAULTS: Dict[str, Any] = {
    'default_action': 'SCMP_ACT_ERRNO',
    'allow_action': 'SCMP_ACT_ALLOW',
    'go_command': 'go',
    'extra_syscalls': [],
}


def load_config(config_path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Load the ``profile`` section of a YAML file over FALLBACK_DEFAULTS."""
    if not config_path:
        return copy.deepcopy(FALLBACK_DEFAULTS)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info("Loading config from: %s", config_file)
    with open(config_file, 'r') as f:
        try:
            user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid config {config_path}: {e}") from e

    if not isinstance(user_config, dict) or 'profile' not in user_config:
        logger.warning("Config file has no 'profile' section. Using defaults.")
        return copy.deepcopy(FALLBACK_DEFAULTS)

    section = user_config['profile'] or {}
    if not isinstance(section, dict):
        raise ValueError(f"'profile' section must be a mapping, got: {section!r}")

    config = copy.deepcopy(FALLBACK_DEFAULTS)
    config.update(section)

    extra = config['extra_syscalls']
    if not isinstance(extra, list) or not all(isinstance(name, str) for name in extra):
        raise ValueError(f"'extra_syscalls' must be a list of syscall names, got: {extra!r}")

    return config
