"""Tests for config module."""

import tempfile
from pathlib import Path

from core.config import DEFAULT_CONFIG, Config, config_from_dict, get_config, save_config


def test_default_config():
    """Test loading default config when no file exists."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config = get_config(Path(temp_dir) / "missing.toml")
        assert isinstance(config, Config)
        assert config is DEFAULT_CONFIG
        assert config.suggestion_debounce_ms == 100
        assert config.suggestion_max_context_lines == 1000
        assert config.suggestion_chunk_size == 200
        assert config.suggestion_cache_ttl_sec == 300
        assert config.suggestion_cache_capacity_bytes == 50 * 1024 * 1024
        assert config.keys_accept == "<M-l>"
        assert config.keys_next == "<M-j>"
        assert config.keys_prev == "<M-k>"


def test_config_from_file():
    """Test loading config from TOML file."""
    config_content = """
log_level = "DEBUG"

[ai]
provider = "openai"
model = "gpt-4o-mini"

[suggestion]
debounce_ms = 250
ignored_globs = ["*.lock"]

[suggestion.cache]
ttl_sec = 60

[keys]
accept = "<Tab>"
"""

    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / ".cli_ai_suggest.toml"
        config_path.write_text(config_content)

        config = get_config(config_path)

        assert config.log_level == "DEBUG"
        assert config.provider == "openai"
        assert config.model == "gpt-4o-mini"
        assert config.suggestion_debounce_ms == 250
        assert config.suggestion_ignored_globs == ["*.lock"]
        assert config.suggestion_cache_ttl_sec == 60
        assert config.keys_accept == "<Tab>"
        # Untouched keys keep their defaults
        assert config.keys_next == DEFAULT_CONFIG.keys_next
        assert config.suggestion_chunk_size == DEFAULT_CONFIG.suggestion_chunk_size


def test_invalid_file_falls_back_to_defaults():
    """Test that a broken file yields the defaults."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "broken.toml"
        config_path.write_text("this is = = not toml")
        assert get_config(config_path) is DEFAULT_CONFIG


def test_save_and_reload():
    """Test that a saved config reads back unchanged."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = Path(temp_dir) / "nested" / "config.toml"
        saved = save_config(DEFAULT_CONFIG, config_path)
        assert saved == config_path
        assert get_config(config_path) == DEFAULT_CONFIG


def test_config_from_empty_dict():
    assert config_from_dict({}) == DEFAULT_CONFIG
