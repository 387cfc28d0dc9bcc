"""
Configuration loading for the gateway.

Configuration is an explicit struct handed to the selector and adapters.
Values come from, in order of precedence: explicit arguments (or a YAML
file), environment variables, defaults. Everything is validated when the
config is built, not when a provider is first called.
"""

import os
import logging
from typing import Dict, Any, Mapping, Optional
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT = 60.0


@dataclass
class OpenAISettings:
    """Settings for the OpenAI provider."""
    api_key: Optional[str] = None
    model: str = "gpt-4o"
    embedding_model: str = "text-embedding-3-large"
    base_url: str = "https://api.openai.com/v1"
    organization: Optional[str] = None


@dataclass
class GCPSettings:
    """Settings for the Google Cloud Vertex AI provider."""
    project_id: Optional[str] = None
    location: str = "us-central1"
    model: str = "gemini-1.5-pro"
    embedding_model: str = "text-embedding-004"
    access_token: Optional[str] = None
    base_url: Optional[str] = None


@dataclass
class GatewayConfig:
    """Complete gateway configuration."""
    provider: Optional[str] = None
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    timeout: float = DEFAULT_TIMEOUT
    pricing_path: Optional[str] = None
    openai: OpenAISettings = field(default_factory=OpenAISettings)
    gcp: GCPSettings = field(default_factory=GCPSettings)

    def __post_init__(self):
        if self.provider is not None:
            self.provider = self.provider.strip().lower() or None
        if self.max_output_tokens <= 0:
            raise ConfigurationError(
                f"max_output_tokens must be positive, got {self.max_output_tokens}"
            )
        if not 0 <= self.temperature <= 2:
            raise ConfigurationError(
                f"temperature must be between 0 and 2, got {self.temperature}"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if not self.openai.model or not self.gcp.model:
            raise ConfigurationError("model identifier must not be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "GatewayConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Explicit top-level values, these win over the environment

        Returns:
            Validated configuration
        """
        env = os.environ if environ is None else environ
        max_tokens = env.get("LLM_MAX_OUTPUT_TOKENS") or env.get("OPENAI_MAX_TOKENS")

        values: Dict[str, Any] = {
            "provider": env.get("LLM_PROVIDER") or None,
            "max_output_tokens": _as_int("LLM_MAX_OUTPUT_TOKENS", max_tokens, DEFAULT_MAX_OUTPUT_TOKENS),
            "temperature": _as_float("LLM_TEMPERATURE", env.get("LLM_TEMPERATURE"), DEFAULT_TEMPERATURE),
            "timeout": _as_float("LLM_TIMEOUT", env.get("LLM_TIMEOUT"), DEFAULT_TIMEOUT),
            "pricing_path": env.get("LLM_PRICING_PATH") or None,
            "openai": OpenAISettings(
                api_key=env.get("OPENAI_API_KEY") or None,
                model=env.get("OPENAI_MODEL") or OpenAISettings.model,
                embedding_model=env.get("OPENAI_EMBEDDING_MODEL") or OpenAISettings.embedding_model,
                base_url=env.get("OPENAI_BASE_URL") or OpenAISettings.base_url,
                organization=env.get("OPENAI_ORGANIZATION") or None,
            ),
            "gcp": GCPSettings(
                project_id=env.get("GCP_PROJECT_ID") or env.get("GOOGLE_CLOUD_PROJECT") or None,
                location=env.get("GCP_LOCATION") or GCPSettings.location,
                model=env.get("GCP_MODEL") or GCPSettings.model,
                embedding_model=env.get("GCP_EMBEDDING_MODEL") or GCPSettings.embedding_model,
                access_token=env.get("GCP_ACCESS_TOKEN") or None,
            ),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> "GatewayConfig":
        """
        Build configuration from a parsed YAML/dict structure.

        Keys missing from ``data`` fall back to the environment, then defaults.
        String values of the form ``${VAR}`` are expanded from the environment.
        """
        env = os.environ if environ is None else environ
        base = cls.from_env(env)
        data = _expand_env(dict(data or {}), env)

        unknown = set(data) - {
            "provider", "max_output_tokens", "temperature", "timeout",
            "pricing_path", "openai", "gcp",
        }
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        try:
            openai = OpenAISettings(**{**base.openai.__dict__, **(data.pop("openai", None) or {})})
            gcp = GCPSettings(**{**base.gcp.__dict__, **(data.pop("gcp", None) or {})})
        except TypeError as e:
            raise ConfigurationError(f"Invalid provider settings: {e}") from e

        return cls(
            provider=data.get("provider", base.provider),
            max_output_tokens=_as_int("max_output_tokens", data.get("max_output_tokens"), base.max_output_tokens),
            temperature=_as_float("temperature", data.get("temperature"), base.temperature),
            timeout=_as_float("timeout", data.get("timeout"), base.timeout),
            pricing_path=data.get("pricing_path", base.pricing_path),
            openai=openai,
            gcp=gcp,
        )


def load_config(config_path: Optional[str] = None) -> GatewayConfig:
    """
    Load gateway configuration from a YAML file.

    Args:
        config_path: Path to config file. If None, common locations are
            searched and the environment alone is used when none exists.

    Returns:
        Loaded configuration
    """
    if config_path is None:
        paths = [
            Path("config/llm-gateway.yaml"),
            Path("/etc/llm-gateway/llm-gateway.yaml"),
            Path.home() / ".config/llm-gateway/llm-gateway.yaml",
        ]
        for p in paths:
            if p.exists():
                config_path = str(p)
                break

    if config_path is None:
        logger.info("No gateway config file found, using environment")
        return GatewayConfig.from_env()

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config from {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    logger.info(f"Loaded gateway config from {config_path}")
    return GatewayConfig.from_dict(data)


def _expand_env(value: Any, env: Mapping[str, str]) -> Any:
    """Expand ``${VAR}`` strings, recursing into dicts."""
    if isinstance(value, dict):
        return {k: _expand_env(v, env) for k, v in value.items()}
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return env.get(value[2:-1]) or None
    return value


def _as_int(name: str, value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _as_float(name: str, value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
