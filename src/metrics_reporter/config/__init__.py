"""
Configuration Package - Reporter Settings from YAML.

    - ReporterConfig: flush interval and unit, probe retry delay,
      index naming, nested LoggingConfig
    - ConfigLoader / load_config: YAML files with ${VAR} substitution
      and optional profile overlays (e.g. development, production)

Settings are validated by Pydantic when loaded, so a bad interval or an
unknown log level fails before the reporter starts.
"""

from metrics_reporter.config.loader import ConfigLoader, load_config
from metrics_reporter.config.models import LoggingConfig, ReporterConfig

__all__ = ["ConfigLoader", "LoggingConfig", "ReporterConfig", "load_config"]
