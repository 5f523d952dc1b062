"""
Configuration Loader - YAML Files to ReporterConfig.

Reads a YAML file, substitutes ${VAR} environment placeholders, overlays
an optional profile and validates the result with Pydantic.

File layout:
    reporter:                  # optional root key
      flush_interval: 10
      index_prefix: ${METRICS_INDEX:-metrics}
      logging:
        level: info

Profiles are looked up as profiles/<name>.yaml next to the config file,
then as config/profiles/<name>.yaml under the loader's base path.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from metrics_reporter.config.models import ReporterConfig

logger = logging.getLogger(__name__)

ROOT_KEY = "reporter"

# ${VAR}, ${VAR:-} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{(\w+)(:-([^}]*))?\}")


def interpolate_env(text: str, environ: Optional[Dict[str, str]] = None) -> str:
    """
    Replace ${VAR} placeholders with environment values.

    Args:
        text: Raw YAML text
        environ: Mapping to read from (default: os.environ)

    Raises:
        ValueError: If a placeholder without default names an unset variable
    """
    env = os.environ if environ is None else environ

    def replace(match: "re.Match[str]") -> str:
        name, has_default, default = match.group(1), match.group(2), match.group(3)
        value = env.get(name)
        if value is not None:
            return value
        if has_default is not None:
            return default or ""
        raise ValueError(f"Environment variable '{name}' is required but not set")

    return _ENV_PATTERN.sub(replace, text)


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge overlay into a copy of base; nested mappings merge key by key."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Loads reporter configuration from YAML files."""

    def __init__(
        self,
        base_path: Optional[Path] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Args:
            base_path: Directory relative config paths are resolved against
            environ: Environment for ${VAR} substitution (default: os.environ)
        """
        self._base_path = Path(base_path) if base_path else Path(".")
        self._environ = environ

    def load(
        self,
        config_path: Union[str, Path],
        profile: Optional[str] = None,
    ) -> ReporterConfig:
        """
        Load and validate a config file, optionally overlaid with a profile.

        Raises:
            FileNotFoundError: If the config or profile file doesn't exist
            ValueError: If the file is not a mapping or a variable is unset
            ValidationError: If a setting is invalid
        """
        path = self._resolve(config_path)
        settings = self._read(path)

        if profile:
            profile_path = self._find_profile(path, profile)
            logger.debug(f"Applying config profile '{profile}' from {profile_path}")
            settings = merge_configs(settings, self._read(profile_path))

        return ReporterConfig.model_validate(settings)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> ReporterConfig:
        """Validate settings given as a dictionary (root key optional)."""
        return ReporterConfig.model_validate(self._unwrap(config_dict, "<dict>"))

    def _resolve(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self._base_path / p

    def _read(self, path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")
        text = interpolate_env(path.read_text(encoding="utf-8"), self._environ)
        return self._unwrap(yaml.safe_load(text) or {}, str(path))

    def _unwrap(self, data: Any, source: str) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValueError(
                f"Config {source} must contain a mapping, got {type(data).__name__}"
            )
        section = data.get(ROOT_KEY)
        return section if isinstance(section, dict) else data

    def _find_profile(self, config_file: Path, profile: str) -> Path:
        candidates: List[Path] = [
            config_file.parent / "profiles" / f"{profile}.yaml",
            self._base_path / "config" / "profiles" / f"{profile}.yaml",
        ]
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        raise FileNotFoundError(f"Profile not found: {profile}")


def load_config(
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
) -> ReporterConfig:
    """
    Convenience function to load configuration.

    Example:
        >>> config = load_config("reporter.yaml", profile="production")
        >>> config.flush_interval_seconds
        60.0
    """
    return ConfigLoader(base_path=base_path).load(config_path, profile)
