"""Configuration loading."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib

try:
    import tomli_w
except ImportError:
    tomli_w = None


CONFIG_FILENAME = ".cli_ai_suggest.toml"


@dataclass(frozen=True)
class Config:
    """Application configuration."""
    log_level: str
    # Provider settings
    provider: str
    model: str
    temperature: float
    max_tokens: int
    # Suggestion settings
    suggestion_enabled: bool
    suggestion_debounce_ms: int
    suggestion_throttle_ms: int
    suggestion_min_chars: int
    suggestion_max_context_lines: int
    suggestion_chunk_size: int
    suggestion_cache_ttl_sec: int
    suggestion_cache_capacity_bytes: int
    suggestion_respect_ignore: bool
    suggestion_ignored_globs: List[str]
    # Key settings
    keys_accept: str
    keys_next: str
    keys_prev: str
    keys_dismiss: str
    keys_native_completion: str
    # Network settings
    network_offline: bool
    network_request_timeout_sec: int
    network_circuit_fail_threshold: int
    network_circuit_cooldown_sec: int
    # Metrics settings
    show_metrics: bool
    metrics_window: int


DEFAULT_CONFIG = Config(
    log_level="WARNING",
    provider="xai",
    model="grok-code-fast-1",
    temperature=0.1,
    max_tokens=1024,
    suggestion_enabled=True,
    suggestion_debounce_ms=100,
    suggestion_throttle_ms=100,
    suggestion_min_chars=1,
    suggestion_max_context_lines=1000,
    suggestion_chunk_size=200,
    suggestion_cache_ttl_sec=300,
    suggestion_cache_capacity_bytes=50 * 1024 * 1024,
    suggestion_respect_ignore=True,
    suggestion_ignored_globs=["**/.git/**", "**/node_modules/**", "**/.venv/**"],
    keys_accept="<M-l>",
    keys_next="<M-j>",
    keys_prev="<M-k>",
    keys_dismiss="<C-]>",
    keys_native_completion="<Tab>",
    network_offline=False,
    network_request_timeout_sec=30,
    network_circuit_fail_threshold=5,
    network_circuit_cooldown_sec=60,
    show_metrics=True,
    metrics_window=20,
)


def default_config_path() -> Path:
    """Return the per-user configuration file path."""
    return Path.home() / CONFIG_FILENAME


def config_from_dict(data: dict) -> Config:
    """
    Build a configuration from parsed TOML data, defaulting missing keys.

    Args:
        data: Parsed TOML document.

    Returns:
        The resulting configuration.
    """
    ai = data.get("ai", {})
    suggestion = data.get("suggestion", {})
    cache = suggestion.get("cache", {})
    keys = data.get("keys", {})
    network = data.get("network", {})

    return Config(
        log_level=data.get("log_level", DEFAULT_CONFIG.log_level),
        provider=ai.get("provider", DEFAULT_CONFIG.provider),
        model=ai.get("model", DEFAULT_CONFIG.model),
        temperature=ai.get("temperature", DEFAULT_CONFIG.temperature),
        max_tokens=ai.get("max_tokens", DEFAULT_CONFIG.max_tokens),
        suggestion_enabled=suggestion.get("enabled", DEFAULT_CONFIG.suggestion_enabled),
        suggestion_debounce_ms=suggestion.get("debounce_ms", DEFAULT_CONFIG.suggestion_debounce_ms),
        suggestion_throttle_ms=suggestion.get("throttle_ms", DEFAULT_CONFIG.suggestion_throttle_ms),
        suggestion_min_chars=suggestion.get("min_chars", DEFAULT_CONFIG.suggestion_min_chars),
        suggestion_max_context_lines=suggestion.get("max_context_lines", DEFAULT_CONFIG.suggestion_max_context_lines),
        suggestion_chunk_size=suggestion.get("chunk_size", DEFAULT_CONFIG.suggestion_chunk_size),
        suggestion_cache_ttl_sec=cache.get("ttl_sec", DEFAULT_CONFIG.suggestion_cache_ttl_sec),
        suggestion_cache_capacity_bytes=cache.get("capacity_bytes", DEFAULT_CONFIG.suggestion_cache_capacity_bytes),
        suggestion_respect_ignore=suggestion.get("respect_ignore", DEFAULT_CONFIG.suggestion_respect_ignore),
        suggestion_ignored_globs=suggestion.get("ignored_globs", DEFAULT_CONFIG.suggestion_ignored_globs),
        keys_accept=keys.get("accept", DEFAULT_CONFIG.keys_accept),
        keys_next=keys.get("next", DEFAULT_CONFIG.keys_next),
        keys_prev=keys.get("prev", DEFAULT_CONFIG.keys_prev),
        keys_dismiss=keys.get("dismiss", DEFAULT_CONFIG.keys_dismiss),
        keys_native_completion=keys.get("native_completion", DEFAULT_CONFIG.keys_native_completion),
        network_offline=network.get("offline", DEFAULT_CONFIG.network_offline),
        network_request_timeout_sec=network.get("request_timeout_sec", DEFAULT_CONFIG.network_request_timeout_sec),
        network_circuit_fail_threshold=network.get("circuit_fail_threshold", DEFAULT_CONFIG.network_circuit_fail_threshold),
        network_circuit_cooldown_sec=network.get("circuit_cooldown_sec", DEFAULT_CONFIG.network_circuit_cooldown_sec),
        show_metrics=data.get("show_metrics", DEFAULT_CONFIG.show_metrics),
        metrics_window=data.get("metrics_window", DEFAULT_CONFIG.metrics_window),
    )


def get_config(path: Optional[Path] = None) -> Config:
    """
    Load configuration from ~/.cli_ai_suggest.toml if present, else use defaults.

    Args:
        path: Optional explicit configuration file.

    Returns:
        The loaded configuration.
    """
    config_path = path or default_config_path()

    if not config_path.exists():
        return DEFAULT_CONFIG

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return config_from_dict(data)
    except Exception:
        # If loading fails, return defaults
        return DEFAULT_CONFIG


def save_config(config: Config, path: Optional[Path] = None) -> Path:
    """
    Save configuration to ~/.cli_ai_suggest.toml.

    Args:
        config: The configuration to save.
        path: Optional explicit destination.

    Returns:
        The path written.
    """
    if tomli_w is None:
        raise ImportError("tomli_w is required to save configuration")

    config_path = path or default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    config_dict = {
        "log_level": config.log_level,
        "show_metrics": config.show_metrics,
        "metrics_window": config.metrics_window,
        "ai": {
            "provider": config.provider,
            "model": config.model,
            "temperature": config.temperature,
            "max_tokens": config.max_tokens
        },
        "suggestion": {
            "enabled": config.suggestion_enabled,
            "debounce_ms": config.suggestion_debounce_ms,
            "throttle_ms": config.suggestion_throttle_ms,
            "min_chars": config.suggestion_min_chars,
            "max_context_lines": config.suggestion_max_context_lines,
            "chunk_size": config.suggestion_chunk_size,
            "respect_ignore": config.suggestion_respect_ignore,
            "ignored_globs": config.suggestion_ignored_globs,
            "cache": {
                "ttl_sec": config.suggestion_cache_ttl_sec,
                "capacity_bytes": config.suggestion_cache_capacity_bytes
            }
        },
        "keys": {
            "accept": config.keys_accept,
            "next": config.keys_next,
            "prev": config.keys_prev,
            "dismiss": config.keys_dismiss,
            "native_completion": config.keys_native_completion
        },
        "network": {
            "offline": config.network_offline,
            "request_timeout_sec": config.network_request_timeout_sec,
            "circuit_fail_threshold": config.network_circuit_fail_threshold,
            "circuit_cooldown_sec": config.network_circuit_cooldown_sec
        }
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(config_dict, f)
    return config_path
