"""
Configuration management for MLX Forge (global YAML settings plus fixed tool constants)
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from .interpreter import Interpreter, parse_interpreter

logger = logging.getLogger(__name__)

# External tool invoked for conversions: <python> -m mlx_lm convert ...
CONVERSION_MODULE = "mlx_lm"
CONVERT_SUBCOMMAND = "convert"

# Import names checked by the diagnostic script and the matching pip distributions
REQUIRED_MODULES = ("mlx", "mlx_lm")
PIP_PACKAGES = ("mlx", "mlx-lm")
INSTALL_COMMAND = "pip install " + " ".join(PIP_PACKAGES)


class ConfigManager:
    GLOBAL_CONFIG_PATH = Path.home() / ".mlx_forge_config.yaml"
    DEFAULT_GLOBAL_CONFIG = {
        "python_path": "auto",
        "quantization": "none",
    }

    def __init__(self, config_path=None):
        self.config_path = Path(config_path) if config_path else self.GLOBAL_CONFIG_PATH
        self.global_config = self._load_global_config()

    def _load_global_config(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            return self.DEFAULT_GLOBAL_CONFIG.copy()
        try:
            with open(self.config_path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read {self.config_path}, using defaults: {e}")
            return self.DEFAULT_GLOBAL_CONFIG.copy()
        merged = self.DEFAULT_GLOBAL_CONFIG.copy()
        if isinstance(data, dict):
            merged.update(data)
        return merged

    def _save_global_config(self, config_dict):
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, indent=2)

    def all(self):
        return self.global_config.copy()

    def get(self, key):
        return self.global_config.get(key, None)

    def set(self, key, value):
        self.global_config[key] = value
        self._save_global_config(self.global_config)
        return value

    def interpreter(self) -> Interpreter:
        return parse_interpreter(self.get("python_path"))

    def quantization(self) -> str:
        return str(self.get("quantization") or "none")
