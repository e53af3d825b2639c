"""Configuration loader for the graphview engine."""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"

API_BASE_URL_ENV = "GRAPHVIEW_API_BASE_URL"
API_USER_ID_ENV = "GRAPHVIEW_USER_ID"
ENV_FILE_VAR = "GRAPHVIEW_ENV_FILE"
ENV_PREFIX = "GRAPHVIEW_"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class APIConfig(_FrozenModel):
    """Connection settings for the knowledge API."""

    base_url: str = Field(..., min_length=1)
    user_id: str = Field("admin", min_length=1)
    timeout_seconds: float = Field(10.0, gt=0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class CanvasConfig(_FrozenModel):
    """Logical canvas dimensions shared by layout, hit testing and rendering."""

    width: float = Field(600.0, gt=0)
    height: float = Field(400.0, gt=0)
    padding: float = Field(50.0, ge=0)
    node_radius: float = Field(20.0, gt=0)

    @model_validator(mode="after")
    def _validate_padding(self) -> "CanvasConfig":
        if 2 * self.padding >= min(self.width, self.height):
            msg = "canvas.padding must leave a non-empty interior"
            raise ValueError(msg)
        return self

    @property
    def centre(self) -> tuple[float, float]:
        """Return the centre of the canvas in canvas coordinates."""

        return self.width / 2.0, self.height / 2.0


class PollingConfig(_FrozenModel):
    """Refresh cadence for each polled resource."""

    graph_interval_seconds: float = Field(5.0, gt=0)
    stats_interval_seconds: float = Field(5.0, gt=0)
    documents_interval_seconds: float = Field(10.0, gt=0)


class SceneConfig(_FrozenModel):
    """Display settings for the scene builder and host view."""

    label_max_chars: int = Field(12, ge=1)
    ellipsis: str = Field("…")
    document_preview_limit: int = Field(6, ge=0)
    document_snippet_chars: int = Field(40, ge=1)


class HostConfig(_FrozenModel):
    """Settings for the FastAPI host view."""

    allowed_origins: List[str] = Field(default_factory=list)


class AppConfig(_FrozenModel):
    """Top-level configuration composed from config.yaml."""

    api: APIConfig
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    scene: SceneConfig = Field(default_factory=SceneConfig)
    host: HostConfig = Field(default_factory=HostConfig)

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to config.yaml at the repository root.
        """
        return REPO_ROOT / "config.yaml"


def _env_file() -> Optional[Path]:
    """Return the dotenv file to consult, if any."""

    configured = os.getenv(ENV_FILE_VAR)
    if not configured:
        return DEFAULT_ENV_FILE if DEFAULT_ENV_FILE.is_file() else None
    path = Path(configured).expanduser()
    if path.is_file():
        return path
    LOGGER.warning("%s points at a missing file: %s", ENV_FILE_VAR, path)
    return None


def _read_env_file(path: Path) -> Dict[str, str]:
    """Return the ``GRAPHVIEW_*`` assignments found in a dotenv file."""

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        LOGGER.warning("Unable to read environment file at %s", path)
        return {}
    values: Dict[str, str] = {}
    for line in lines:
        key, sep, value = line.strip().removeprefix("export ").partition("=")
        key = key.strip()
        if sep and key.startswith(ENV_PREFIX):
            values[key] = value.strip().strip("\"'")
    return values


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay ``GRAPHVIEW_*`` settings onto the parsed YAML mapping.

    Process environment values win over the dotenv file; blank values are
    ignored.
    """

    env_path = _env_file()
    file_values = _read_env_file(env_path) if env_path is not None else {}

    def _lookup(name: str) -> str:
        return (os.getenv(name) or "").strip() or file_values.get(name, "").strip()

    api_section = dict(raw_content.get("api") or {})
    base_url = _lookup(API_BASE_URL_ENV)
    if base_url:
        api_section["base_url"] = base_url
        LOGGER.info("API base URL overridden from environment: %s", base_url)
    user_id = _lookup(API_USER_ID_ENV)
    if user_id:
        api_section["user_id"] = user_id
    return {**raw_content, "api": api_section}


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Parse ``path`` and return its top-level mapping.

    Raises:
        ConfigError: If the file is missing, malformed or not a mapping.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML syntax in {path}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load and validate ``config.yaml`` (or ``path``) with environment overrides.

    Raises:
        ConfigError: If the configuration cannot be read or validated.
    """

    config_path = path or AppConfig.default_path()
    try:
        return AppConfig.model_validate(_apply_environment_overrides(_read_yaml(config_path)))
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values in %s: %s", config_path, exc)
        raise ConfigError("Configuration validation failed") from exc
