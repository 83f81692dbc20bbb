"""CLI configuration: YAML file, then environment, then command-line options."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigError

ENV_PREFIX = "SWEEPER_"
DEFAULT_CONFIG_PATH = Path.home() / ".sweeper" / "config.yaml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Runtime configuration.

    Attributes:
        log_level: Root log level
        max_concurrency: Maximum in-flight removal requests
        request_timeout: Seconds before a pending removal is logged as slow (None: never)
        max_retries: Attempts per id for transient failures
        retry_base_delay: First retry backoff in seconds
        min_group_size: Default minimum duplicate group size
        audit_enabled: Write executed runs to the audit log
        audit_dir: Audit log directory (None: ~/.sweeper/audit-logs)
        aws_profile: AWS profile for the AWS backend
        aws_region: Default AWS region for the AWS backend
    """

    log_level: str = "WARNING"
    max_concurrency: int = 8
    request_timeout: Optional[float] = 30.0
    max_retries: int = 3
    retry_base_delay: float = 1.0
    min_group_size: int = 2
    audit_enabled: bool = True
    audit_dir: Optional[str] = None
    aws_profile: Optional[str] = None
    aws_region: Optional[str] = None

    @classmethod
    def load(cls, path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> "Config":
        """Load configuration.

        Precedence (lowest first): defaults, YAML file, ``SWEEPER_*``
        environment variables. A missing file is not an error.

        Args:
            path: Config file (default: $SWEEPER_CONFIG or ~/.sweeper/config.yaml)
            environ: Environment mapping (default: os.environ)

        Raises:
            ConfigError: If the file or a value is invalid
        """
        environ = dict(os.environ if environ is None else environ)
        config_path = Path(path or environ.get(f"{ENV_PREFIX}CONFIG") or DEFAULT_CONFIG_PATH).expanduser()

        values: Dict[str, Any] = {}
        if config_path.exists():
            try:
                with open(config_path, "r") as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {config_path} must contain a mapping")
            values.update(data)

        for f in fields(cls):
            env_name = f"{ENV_PREFIX}{f.name.upper()}"
            if env_name in environ:
                values[f.name] = environ[env_name]

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        config = cls()
        for name, raw in values.items():
            setattr(config, name, cls._coerce(name, raw))
        config.validate()
        return config

    @classmethod
    def _coerce(cls, name: str, raw: Any) -> Any:
        default = getattr(cls(), name)
        if raw is None or (isinstance(raw, str) and raw.strip().lower() in ("", "none", "null")):
            return None
        try:
            if isinstance(default, bool):
                if isinstance(raw, bool):
                    return raw
                lowered = str(raw).strip().lower()
                if lowered in ("1", "true", "yes", "on"):
                    return True
                if lowered in ("0", "false", "no", "off"):
                    return False
                raise ValueError(f"not a boolean: {raw!r}")
            if isinstance(default, int):
                return int(raw)
            if isinstance(default, float) or name == "request_timeout":
                return float(raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid value for {name}: {e}") from e
        return str(raw)

    def validate(self) -> bool:
        """Validate configuration values.

        Raises:
            ConfigError: If any value is out of range
        """
        if self.log_level is None or self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        for name in ("max_concurrency", "max_retries", "min_group_size"):
            value = getattr(self, name)
            if value is None or value < 1:
                raise ConfigError(f"{name} must be at least 1")
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")
        if self.retry_base_delay is None or self.retry_base_delay < 0:
            raise ConfigError("retry_base_delay cannot be negative")
        if self.audit_enabled is None:
            self.audit_enabled = False
        return True
