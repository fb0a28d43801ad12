"""
Configuration loader for semantic_commit_helper.

The tool ships with built-in model profiles for a local Ollama server
(``mistral`` and ``deepseek``) and for the OpenAI chat-completion API
(``openai``). Users may override or extend them with a JSON file named
``config.json`` located in the ``~/.checkupcodes/`` directory. Values from
the file are merged over the built-in defaults.

If the configuration file is malformed, has fields of the wrong type, or
names an unknown default model, a :class:`ConfigurationError` is raised.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments where
# the root logger is not configured. The CLI configures logging explicitly.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILENAME = "config.json"
API_KEY_ENV_VAR = "OPENAI_API_KEY"
OLLAMA_GENERATE_URL = "http://127.0.0.1:11434/api/generate"
OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_REQUEST_TIMEOUT = 120.0


class ConfigurationError(Exception):
    """Raised when the model configuration or credentials are missing or invalid."""

    # Human readable help attached by the commit orchestrator.
    remediation: Optional[str] = None


@dataclass(frozen=True)
class ModelProfile:
    """Named bundle identifying a generation backend and its call parameters.

    Parameters
    ----------
    name : str
        Identifier of the profile, e.g. ``"mistral"``. Also used as the
        model name sent to the backend unless ``model`` is given.
    api_url : str
        Endpoint of the backend.
    temperature : float
        Sampling temperature.
    top_p : float
        Nucleus sampling parameter.
    model : str, optional
        Backend-side model name when it differs from ``name``.
    request_timeout : float
        Timeout in seconds for the HTTP request.
    """

    name: str
    api_url: str
    temperature: float = 0.7
    top_p: float = 0.9
    model: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @property
    def identifier(self) -> str:
        return self.name

    @property
    def model_name(self) -> str:
        return self.model or self.name

    @property
    def is_chat_completion(self) -> bool:
        """True for remote chat-completion style endpoints."""
        return self.api_url.rstrip("/").endswith("/chat/completions")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "api_url": self.api_url,
            "temperature": self.temperature,
            "top_p": self.top_p,
            "request_timeout": self.request_timeout,
        }
        if self.model is not None:
            data["model"] = self.model
        return data


@dataclass(frozen=True)
class AIConfig:
    """Complete model configuration: the profiles and which one is the default."""

    default_model: str
    models: Dict[str, ModelProfile]
    single_shot_families: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_model": self.default_model,
            "single_shot_families": list(self.single_shot_families),
            "models": {name: profile.to_dict() for name, profile in self.models.items()},
        }


def default_config() -> AIConfig:
    """Return the built-in configuration."""
    return AIConfig(
        default_model="mistral",
        models={
            "mistral": ModelProfile(name="mistral", api_url=OLLAMA_GENERATE_URL),
            "deepseek": ModelProfile(name="deepseek", api_url=OLLAMA_GENERATE_URL),
            "openai": ModelProfile(name="openai", api_url=OPENAI_CHAT_URL, model="gpt-4o-mini"),
        },
        single_shot_families=["deepseek"],
    )


def _get_config_directory() -> Path:
    """Return the ``~/.checkupcodes/`` directory holding the user configuration."""
    return Path.home() / ".checkupcodes"


def _parse_profile(name: str, data: Any, base: Optional[ModelProfile]) -> ModelProfile:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Model '{name}' must be a JSON object")

    api_url = data.get("api_url", base.api_url if base else None)
    if not isinstance(api_url, str) or not api_url:
        raise ConfigurationError(f"Model '{name}': 'api_url' must be a non-empty string")

    for key in ("temperature", "top_p", "request_timeout"):
        if key in data and (isinstance(data[key], bool) or not isinstance(data[key], (int, float))):
            raise ConfigurationError(f"Model '{name}': '{key}' must be a number")
    if "model" in data and not isinstance(data["model"], str):
        raise ConfigurationError(f"Model '{name}': 'model' must be a string")

    template = base or ModelProfile(name=name, api_url=api_url)
    return replace(
        template,
        name=name,
        api_url=api_url,
        temperature=float(data.get("temperature", template.temperature)),
        top_p=float(data.get("top_p", template.top_p)),
        model=data.get("model", template.model),
        request_timeout=float(data.get("request_timeout", template.request_timeout)),
    )


def parse_config(data: Mapping[str, Any]) -> AIConfig:
    """Merge a decoded configuration mapping over the built-in defaults.

    Raises
    ------
    ConfigurationError
        If any value has the wrong type or the default model is unknown.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError("Configuration must be a JSON object")

    defaults = default_config()
    models = dict(defaults.models)

    raw_models = data.get("models", {})
    if not isinstance(raw_models, dict):
        raise ConfigurationError("'models' must be an object")
    for name, raw_profile in raw_models.items():
        models[name] = _parse_profile(name, raw_profile, models.get(name))

    default_model = data.get("default_model", defaults.default_model)
    if not isinstance(default_model, str):
        raise ConfigurationError("'default_model' must be a string")
    if default_model not in models:
        raise ConfigurationError(f"Default model '{default_model}' not found in config")

    families = data.get("single_shot_families", defaults.single_shot_families)
    if not isinstance(families, list) or not all(isinstance(f, str) for f in families):
        raise ConfigurationError("'single_shot_families' must be a list of strings")

    return AIConfig(default_model=default_model, models=models, single_shot_families=list(families))


def load_config() -> AIConfig:
    """Load the model configuration from the user's home directory.

    The built-in defaults are returned when no configuration file exists.

    Returns
    -------
    AIConfig
        The validated configuration.

    Raises
    ------
    ConfigurationError
        If the configuration file is malformed or invalid.
    """
    config_path = _get_config_directory() / CONFIG_FILENAME
    if not config_path.exists():
        logger.debug("No configuration file at %s; using built-in defaults", config_path)
        return default_config()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigurationError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    config = parse_config(data)
    logger.debug("Loaded model configuration from: %s", config_path)
    return config


def save_config(config: AIConfig) -> Path:
    """Write ``config`` to the user configuration file and return its path."""
    config_dir = _get_config_directory()
    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / CONFIG_FILENAME
    config_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    logger.debug("Saved model configuration to: %s", config_path)
    return config_path


def get_available_models(config: AIConfig) -> List[str]:
    return list(config.models)


def get_model_profile(config: AIConfig, model_name: Optional[str] = None) -> ModelProfile:
    """Return the profile for ``model_name``, or for the default model.

    Raises
    ------
    ConfigurationError
        If the model is not present in the configuration.
    """
    selected = model_name or config.default_model
    profile = config.models.get(selected)
    if profile is None:
        raise ConfigurationError(f"Model {selected} not found in config")
    return profile


def set_default_model(model_name: str) -> AIConfig:
    """Persist ``model_name`` as the default model and return the new config."""
    config = load_config()
    if model_name not in config.models:
        raise ConfigurationError(f"Model {model_name} not found in config")
    updated = replace(config, default_model=model_name)
    save_config(updated)
    return updated


def get_api_key(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the remote backend API key from the environment, if set."""
    env = os.environ if environ is None else environ
    key = env.get(API_KEY_ENV_VAR, "").strip()
    return key or None
