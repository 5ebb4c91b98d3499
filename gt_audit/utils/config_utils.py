"""
Configuration utility functions.
"""

import copy
import os
from typing import Any, Dict, Optional

import yaml

from ..core.errors import ConfigError
from ..core.types import AuditConfig
from .file_utils import FileUtils


class ConfigUtils:
    """Utility functions for configuration management."""

    @staticmethod
    def create_default_config() -> Dict[str, Any]:
        """
        Create default configuration.

        Returns:
            Default configuration dictionary
        """
        return {
            "matching": {
                "confidence_threshold": 0.25,
                "iou_threshold": 0.5,
                "localization_iou_threshold": None,
            },
            "classes": {
                "groups": [],
                "ignore_case": False,
            },
            "sampling": {
                "size": 0,
                "seed": 42,
            },
            "gate": {
                "fail_on_high": None,
                "fail_on_medium": None,
            },
            "severity": {},
            "runtime": {
                "workers": 1,
            },
        }

    @staticmethod
    def validate_config(config: Dict[str, Any]) -> bool:
        """
        Validate configuration structure.

        Args:
            config: Configuration to validate

        Returns:
            True if valid, False otherwise
        """
        required_sections = ["matching", "classes", "sampling", "gate"]
        for section in required_sections:
            if not isinstance(config.get(section), dict):
                return False
        return True

    @staticmethod
    def merge_configs(base_config: Dict[str, Any],
                      override_config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge two configurations.

        Args:
            base_config: Base configuration
            override_config: Override configuration

        Returns:
            Merged configuration
        """
        merged = copy.deepcopy(base_config)
        for key, value in override_config.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = ConfigUtils.merge_configs(merged[key], value)
            else:
                merged[key] = value
        return merged

    @staticmethod
    def load_config(path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load a YAML configuration file on top of the defaults.

        Args:
            path: YAML file (defaults only if None)

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigError: The file cannot be parsed or has the wrong shape
        """
        config = ConfigUtils.create_default_config()
        if path is None:
            return config
        if not os.path.exists(path):
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            loaded = FileUtils.load_yaml(path) or {}
        except (yaml.YAMLError, UnicodeDecodeError) as e:
            raise ConfigError(f"Could not parse configuration file {path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration file {path} must contain a mapping")

        merged = ConfigUtils.merge_configs(config, loaded)
        if not ConfigUtils.validate_config(merged):
            raise ConfigError(f"Configuration file {path} has malformed sections")
        return merged

    @staticmethod
    def config_to_audit_config(config: Dict[str, Any]) -> AuditConfig:
        """
        Convert configuration dictionary to AuditConfig.

        Args:
            config: Configuration dictionary

        Returns:
            AuditConfig object
        """
        matching = config.get("matching", {})
        classes = config.get("classes", {})
        sampling = config.get("sampling", {})
        gate = config.get("gate", {})
        runtime = config.get("runtime", {}) or {}

        try:
            return AuditConfig(
                confidence_threshold=float(matching.get("confidence_threshold", 0.25)),
                iou_threshold=float(matching.get("iou_threshold", 0.5)),
                localization_iou_threshold=_optional(matching.get("localization_iou_threshold"), float),
                class_groups=classes.get("groups") or (),
                ignore_case=bool(classes.get("ignore_case", False)),
                sample_size=int(sampling.get("size", 0)),
                sample_seed=int(sampling.get("seed", 42)),
                fail_on_high=_optional(gate.get("fail_on_high"), int),
                fail_on_medium=_optional(gate.get("fail_on_medium"), int),
                severity_overrides=config.get("severity") or {},
                workers=int(runtime.get("workers", 1)),
            )
        except ConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e


def _optional(value: Any, cast):
    return None if value is None else cast(value)
