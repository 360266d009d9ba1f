"""Configuration management for aicommit."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".aicommit"
CONFIG_FILE_NAME = "config.json"

MODE_COMMIT = "commit"
MODE_REVIEW = "review"

DEFAULT_REQUEST_TIMEOUT = 30.0

# Every provider speaks the OpenAI chat-completions wire format.
PROVIDERS = {
    "openai": {
        "endpoint": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
    },
    "xai": {
        "endpoint": "https://api.x.ai/v1",
        "api_key_env": "XAI_API_KEY",
    },
    "github": {
        "endpoint": "https://models.github.ai/inference",
        "api_key_env": "GITHUB_TOKEN",
    },
}

MODE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    MODE_COMMIT: {
        "model": "gpt-4.1-mini",
        "model_env": "AICOMMIT_COMMIT_MODEL",
        "persisted_key": "commit_model",
        "temperature": 0.3,
        "max_tokens": 256,
        "context_lines": 0,
    },
    MODE_REVIEW: {
        "model": "gpt-4.1",
        "model_env": "AICOMMIT_REVIEW_MODEL",
        "persisted_key": "review_model",
        "temperature": 0.2,
        "max_tokens": 2048,
        "context_lines": 10,
    },
}


@dataclass(frozen=True)
class Config:
    """Immutable settings for a single run."""

    mode: str
    provider: str
    model: str
    llm_endpoint: str
    api_key_env: str
    temperature: float
    max_tokens: int
    context_lines: int
    extra_prompt: Optional[str] = None
    path: Optional[str] = None
    auto_add: bool = False
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    git_repo_path: str = "."

    @property
    def is_review(self) -> bool:
        return self.mode == MODE_REVIEW

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key from the configured environment variable."""
        return os.environ.get(self.api_key_env) or None

    def require_api_key(self) -> str:
        key = self.resolve_api_key()
        if not key:
            raise ConfigError(
                f"Environment variable '{self.api_key_env}' is not set or empty."
            )
        return key

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _ensure_path(path_like: Optional[Path]) -> Path:
    if path_like is None:
        return Path.cwd().resolve(strict=False)
    return Path(path_like).expanduser().resolve(strict=False)


def config_file_path(repo_root: Optional[Path] = None) -> Path:
    return _ensure_path(repo_root) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_persisted_settings(repo_root: Optional[Path] = None) -> Dict[str, Any]:
    """Read repository-level defaults from ``.aicommit/config.json``.

    A missing file yields an empty mapping. An unreadable or non-object file
    is a configuration error rather than something to silently ignore.
    """
    cfg_path = config_file_path(repo_root)
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text())
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read {cfg_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{cfg_path} must contain a JSON object")
    return data


def _parse_timeout(raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid request timeout %r", raw)
        return DEFAULT_REQUEST_TIMEOUT
    if value <= 0:
        logger.warning("Ignoring non-positive request timeout %r", raw)
        return DEFAULT_REQUEST_TIMEOUT
    return value


def load_config(
    *,
    review: bool = False,
    extra_prompt: Optional[str] = None,
    path: Optional[str] = None,
    auto_add: bool = False,
    repo_root: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Config:
    """Build the run configuration from overrides, environment and file.

    Raises ConfigError when extra prompt text is supplied outside review
    mode. Nothing else has been touched at that point.
    """
    if extra_prompt is not None and not review:
        raise ConfigError("-p can only be used together with -r (review mode)")

    overrides = dict(overrides or {})
    environ = os.environ if env is None else env
    root = _ensure_path(repo_root)
    persisted = load_persisted_settings(root)

    mode = MODE_REVIEW if review else MODE_COMMIT
    mode_defaults = MODE_DEFAULTS[mode]

    provider = (
        overrides.get("provider")
        or environ.get("AICOMMIT_PROVIDER")
        or persisted.get("provider")
        or "openai"
    )
    if provider not in PROVIDERS:
        raise ConfigError(
            f"Unknown provider '{provider}'. "
            f"Choose one of: {', '.join(sorted(PROVIDERS))}"
        )
    provider_defaults = PROVIDERS[provider]
    # Persisted endpoint/key only apply to the provider they were saved for.
    same_provider = persisted.get("provider", provider) == provider

    model = (
        overrides.get("model")
        or environ.get(mode_defaults["model_env"])
        or persisted.get(mode_defaults["persisted_key"])
        or mode_defaults["model"]
    )
    endpoint = (
        overrides.get("endpoint")
        or environ.get("AICOMMIT_LLM_ENDPOINT")
        or (persisted.get("llm_endpoint") if same_provider else None)
        or provider_defaults["endpoint"]
    )
    api_key_env = (
        overrides.get("api_key_env")
        or (persisted.get("api_key_env") if same_provider else None)
        or provider_defaults["api_key_env"]
    )

    temperature = persisted.get("temperature", mode_defaults["temperature"])
    if overrides.get("temperature") is not None:
        temperature = overrides["temperature"]
    try:
        temperature = float(temperature)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid temperature {temperature!r}") from exc

    timeout_raw = (
        overrides.get("request_timeout")
        or environ.get("AICOMMIT_LLM_REQUEST_TIMEOUT")
        or persisted.get("request_timeout")
        or DEFAULT_REQUEST_TIMEOUT
    )

    config = Config(
        mode=mode,
        provider=provider,
        model=str(model),
        llm_endpoint=str(endpoint),
        api_key_env=str(api_key_env),
        temperature=temperature,
        max_tokens=int(mode_defaults["max_tokens"]),
        context_lines=int(mode_defaults["context_lines"]),
        extra_prompt=extra_prompt,
        path=path,
        auto_add=auto_add,
        request_timeout=_parse_timeout(timeout_raw),
        git_repo_path=str(root),
    )
    logger.debug(
        "Loaded config mode=%s provider=%s model=%s", mode, provider, config.model
    )
    return config
