"""Loader for the optional YAML file holding CLI defaults."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from checkoutdeployer.constants import DEFAULTS_FILE_NAME
from checkoutdeployer.errors import DeployerError


class ConfigLoader:
    """Reads `.checkoutdeployer.yml` style files and checks their values."""

    KEY_TYPES = {
        "build_command": str,
        "dist_dir": str,
        "max_workers": int,
        "loader_script": str,
        "verbose": bool,
        "log_file": str,
    }

    def find_default(self, project_dir: str) -> Optional[str]:
        candidate = os.path.join(project_dir, DEFAULTS_FILE_NAME)
        if os.path.exists(candidate):
            return candidate
        return None

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise DeployerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise DeployerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise DeployerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - set(self.KEY_TYPES))
        if unknown:
            raise DeployerError(f"Unknown configuration keys: {', '.join(unknown)}")

        for key, value in parsed.items():
            expected = self.KEY_TYPES[key]
            # bool is an int subclass; reject it where a count is expected
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                raise DeployerError(
                    f"Config key '{key}' must be of type {expected.__name__}, got {value!r}."
                )

        if "max_workers" in parsed and parsed["max_workers"] < 1:
            raise DeployerError("Config key 'max_workers' must be at least 1.")

        return parsed
