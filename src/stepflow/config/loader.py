"""Stepflow configuration loader."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from stepflow.errors import WorkflowValidationError
from stepflow.logging import LogConfig, get_logger
from stepflow.telemetry import OTLPExporterConfig, TelemetryConfig
from stepflow.types import (
    BackoffType,
    LogFormat,
    LogLevel,
    ValidationIssue,
    ValidationResult,
)

from .models import EngineConfig, RetryPolicy

CONFIG_PATH_ENV = "STEPFLOW_CONFIG_PATH"
DEFAULT_CONFIG_FILE = "stepflow.yaml"

logger = get_logger("config")


def _config_error(detail: str) -> WorkflowValidationError:
    return WorkflowValidationError(detail, [ValidationIssue(path="config", message=detail)])


def resolve_env_vars(value: str) -> str:
    """Resolve environment variable references in string.

    Supports:
    - ${VAR} - Required, error if not set
    - ${VAR:-default} - With default value
    - ${VAR:?error message} - Required with custom error

    Args:
        value: String with potential env var references

    Returns:
        String with env vars resolved

    Raises:
        WorkflowValidationError: If a required var is not set
    """
    pattern = r"\$\{([^}:]+)(?::([?-])([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        operator = match.group(2)  # '-' or '?' or None
        operand = match.group(3)  # default value or error message

        env_value = os.environ.get(var_name)
        if env_value is not None:
            return env_value

        if operator == "-":
            return operand or ""
        if operator == "?":
            raise _config_error(operand or f"Required environment variable {var_name} not set")
        raise _config_error(f"Required environment variable {var_name} not set")

    return re.sub(pattern, replacer, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve env vars in data structure."""
    if isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    else:
        return data


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _section(
    data: dict[str, Any], key: str, path: str, errors: list[ValidationIssue]
) -> dict[str, Any]:
    """Return the mapping under ``key``; anything else is an error and reads as empty."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        errors.append(ValidationIssue(path=path, message=f"{key} must be a mapping"))
        return {}
    return value


def _check_choice(
    value: Any, choices: set[str], path: str, label: str, errors: list[ValidationIssue]
) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        errors.append(ValidationIssue(path=path, message=f"{path} must be a string"))
    elif value not in choices:
        errors.append(ValidationIssue(path=path, message=f"Unknown {label}: {value}"))


def _check_int(
    value: Any, path: str, minimum: int, errors: list[ValidationIssue]
) -> int | None:
    number = _as_int(value)
    if number is None or number < minimum:
        field_name = path.rsplit(".", 1)[-1]
        qualifier = "non-negative" if minimum == 0 else "positive"
        errors.append(
            ValidationIssue(path=path, message=f"{field_name} must be a {qualifier} integer")
        )
        return None
    return number


class ConfigLoader:
    """Load and validate engine configuration."""

    def __init__(self) -> None:
        self._config: EngineConfig | None = None
        self._config_path: Path | None = None

    @property
    def config(self) -> EngineConfig | None:
        return self._config

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> EngineConfig:
        """Load configuration from a YAML file.

        Resolution order if path not specified:
        1. STEPFLOW_CONFIG_PATH environment variable
        2. ./stepflow.yaml
        3. If use_defaults=True and no file found, default configuration

        Args:
            path: Optional path to config file
            use_defaults: Use default config when no file is found

        Returns:
            Loaded EngineConfig

        Raises:
            WorkflowValidationError: If the file is missing (use_defaults=False) or invalid
        """
        if path is None:
            path = os.environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_FILE

        config_path = Path(path)

        if not config_path.exists():
            if use_defaults:
                logger.debug("No config file found, using default configuration", path=str(path))
                return self.load_defaults()
            raise _config_error(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise _config_error(f"Invalid YAML in config file: {e}") from e

        if not isinstance(data, dict):
            raise _config_error("Configuration root must be a mapping")

        data = _resolve_env_vars_recursive(data)
        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> EngineConfig:
        """Load default configuration without a file."""
        return self.load_from_dict({})

    def load_from_dict(self, data: dict[str, Any], config_path: Path | None = None) -> EngineConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary
            config_path: Optional path to config file (for tracking)

        Returns:
            Loaded EngineConfig

        Raises:
            WorkflowValidationError: If configuration is invalid
        """
        validation = self.validate(data)
        if not validation.valid:
            raise WorkflowValidationError.from_issues(
                validation.errors, "Configuration validation failed"
            )

        config = self._build(data)
        self._config = config
        self._config_path = config_path

        logger.debug(
            "Configuration loaded",
            path=str(config_path) if config_path else None,
            backoff=config.retry.backoff.value,
        )
        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate a configuration dictionary without building it.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        known_sections = {"retry", "logging", "telemetry"}
        for key in data:
            if key not in known_sections:
                warnings.append(
                    ValidationIssue(path=key, message=f"Unknown section: {key}", severity="warning")
                )

        retry = _section(data, "retry", "retry", errors)
        _check_choice(
            retry.get("backoff"),
            {b.value for b in BackoffType},
            "retry.backoff",
            "backoff type",
            errors,
        )

        base_int = _check_int(retry.get("base_delay_ms", 1000), "retry.base_delay_ms", 0, errors)
        max_int = _check_int(retry.get("max_delay_ms", 30000), "retry.max_delay_ms", 0, errors)
        if base_int is not None and max_int is not None and max_int < base_int:
            errors.append(
                ValidationIssue(
                    path="retry.max_delay_ms",
                    message="max_delay_ms must not be lower than base_delay_ms",
                )
            )

        log = _section(data, "logging", "logging", errors)
        level = log.get("level")
        _check_choice(
            level.upper() if isinstance(level, str) else level,
            {lv.value for lv in LogLevel},
            "logging.level",
            "log level",
            errors,
        )
        _check_choice(
            log.get("format"), {f.value for f in LogFormat}, "logging.format", "log format", errors
        )
        if "truncate_at" in log:
            _check_int(log["truncate_at"], "logging.truncate_at", 1, errors)

        telemetry = _section(data, "telemetry", "telemetry", errors)
        _section(telemetry, "attributes", "telemetry.attributes", errors)
        otlp = _section(telemetry, "otlp", "telemetry.otlp", errors)
        _check_choice(
            otlp.get("protocol"),
            {"grpc", "http"},
            "telemetry.otlp.protocol",
            "OTLP protocol",
            errors,
        )
        _section(otlp, "headers", "telemetry.otlp.headers", errors)

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def _build(self, data: dict[str, Any]) -> EngineConfig:
        """Build the dataclasses from validated data."""
        retry = data.get("retry") or {}
        retry_policy = RetryPolicy(
            backoff=BackoffType(retry.get("backoff") or BackoffType.EXPONENTIAL.value),
            base_delay_ms=_as_int(retry.get("base_delay_ms", 1000)),
            max_delay_ms=_as_int(retry.get("max_delay_ms", 30000)),
        )

        log = data.get("logging") or {}
        log_config = LogConfig(
            level=LogLevel((log.get("level") or LogLevel.INFO.value).upper()),
            format=LogFormat(log.get("format") or LogFormat.COLORED.value),
            show_context=_as_bool(log.get("show_context", True)),
            truncate_at=_as_int(log.get("truncate_at", 200)),
        )

        telemetry = data.get("telemetry") or {}
        otlp = telemetry.get("otlp") or {}
        telemetry_config = TelemetryConfig(
            enabled=_as_bool(telemetry.get("enabled", True)),
            service_name=telemetry.get("service_name", "stepflow"),
            service_version=str(telemetry.get("service_version", "0.1.0")),
            metrics_enabled=_as_bool(telemetry.get("metrics_enabled", True)),
            traces_enabled=_as_bool(telemetry.get("traces_enabled", True)),
            otlp=OTLPExporterConfig(
                enabled=_as_bool(otlp.get("enabled", False)),
                endpoint=otlp.get("endpoint", "http://localhost:4317"),
                insecure=_as_bool(otlp.get("insecure", True)),
                protocol=otlp.get("protocol") or "grpc",
                headers=dict(otlp.get("headers") or {}),
            ),
            attributes=dict(telemetry.get("attributes") or {}),
        )

        return EngineConfig(retry=retry_policy, logging=log_config, telemetry=telemetry_config)


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load configuration with the default resolution order."""
    return ConfigLoader().load(path)
