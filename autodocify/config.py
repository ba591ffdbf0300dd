"""Configuration loading for autodocify (.autodocify.yml plus environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigurationError

CONFIG_FILENAME = ".autodocify.yml"

DEFAULT_MIN_TEXT_LENGTH = 50
DEFAULT_ALLOWED_HOSTS = ("github.com", "www.github.com")
DEFAULT_ARCHIVE_NAME = "AutoDocifyExport.zip"
DEFAULT_EXPORT_BASE_URL = "https://api.gitbook.com/v1"

ENV_LLM_MODEL_KEYS = ("AUTODOCIFY_LLM_MODEL", "OPENROUTER_MODEL")
ENV_LLM_BASE_URL_KEYS = ("AUTODOCIFY_LLM_BASE_URL",)
ENV_LLM_API_KEY_KEYS = ("AUTODOCIFY_LLM_API_KEY", "OPENROUTER_API_KEY", "OPENAI_API_KEY")
ENV_EXPORT_TOKEN_KEYS = ("AUTODOCIFY_EXPORT_TOKEN", "GITBOOK_API_TOKEN")
ENV_EXPORT_SPACE_KEYS = ("AUTODOCIFY_EXPORT_SPACE_ID", "GITBOOK_SPACE_ID")


@dataclass
class LLMConfig:
    """LLM provider settings from .autodocify.yml."""

    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    request_timeout: Optional[float] = None


@dataclass
class InputConfig:
    """Submission validation limits."""

    min_text_length: int = DEFAULT_MIN_TEXT_LENGTH
    allowed_hosts: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_HOSTS))


@dataclass
class ExportConfig:
    """Archive naming and remote documentation space credentials."""

    archive_name: str = DEFAULT_ARCHIVE_NAME
    base_url: str = DEFAULT_EXPORT_BASE_URL
    space_id: Optional[str] = None
    api_token: Optional[str] = None


@dataclass
class AutoDocifyConfig:
    """Represents the high-level settings defined in .autodocify.yml."""

    root: Path
    llm: LLMConfig = field(default_factory=LLMConfig)
    input: InputConfig = field(default_factory=InputConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


def load_config(config_path: Path | None = None, *, use_env: bool = True) -> AutoDocifyConfig:
    """Load configuration from disk, filling gaps from the environment."""
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()

    data: Dict[str, Any] = {}
    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigurationError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    llm_data = _as_dict(data.get("llm"))
    llm = LLMConfig(
        model=_as_str(llm_data.get("model")),
        base_url=_as_str(llm_data.get("base_url")),
        api_key=_as_str(llm_data.get("api_key")),
        temperature=_as_float(llm_data.get("temperature")),
        max_tokens=_as_int(llm_data.get("max_tokens")),
        request_timeout=_as_float(llm_data.get("request_timeout")),
    )

    input_data = _as_dict(data.get("input"))
    input_config = InputConfig()
    min_length = _as_int(input_data.get("min_text_length"))
    if min_length is not None:
        if min_length < 1:
            raise ConfigurationError("input.min_text_length must be a positive integer")
        input_config.min_text_length = min_length
    hosts = _as_str_list(input_data.get("allowed_hosts"))
    if hosts:
        input_config.allowed_hosts = [host.lower() for host in hosts]

    export_data = _as_dict(data.get("export"))
    export = ExportConfig(
        archive_name=_as_str(export_data.get("archive_name")) or DEFAULT_ARCHIVE_NAME,
        base_url=_as_str(export_data.get("base_url")) or DEFAULT_EXPORT_BASE_URL,
        space_id=_as_str(export_data.get("space_id")),
        api_token=_as_str(export_data.get("api_token")),
    )

    if use_env:
        llm.model = llm.model or _first_env_value(ENV_LLM_MODEL_KEYS)
        llm.base_url = llm.base_url or _first_env_value(ENV_LLM_BASE_URL_KEYS)
        llm.api_key = llm.api_key or _first_env_value(ENV_LLM_API_KEY_KEYS)
        export.api_token = export.api_token or _first_env_value(ENV_EXPORT_TOKEN_KEYS)
        export.space_id = export.space_id or _first_env_value(ENV_EXPORT_SPACE_KEYS)

    return AutoDocifyConfig(root=root, llm=llm, input=input_config, export=export)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _first_env_value(keys: Sequence[str]) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
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


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []
