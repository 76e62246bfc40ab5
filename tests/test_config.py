"""
Tests for the configuration singleton.
"""

import pytest

from config import ConfigurationManager, get_config


def test_dot_notation_lookup():
    assert get_config("acquisition.pdf.max_pages") == 3
    assert get_config("completion.min_text_length") == 50
    assert get_config("does.not.exist", "fallback") == "fallback"


def test_set_creates_sections():
    ConfigurationManager().set("extraction.provider.extra_vendors", ["Hetzner"])
    ConfigurationManager().set("brand.new.key", 1)

    assert get_config("extraction.provider.extra_vendors") == ["Hetzner"]
    assert get_config("brand.new.key") == 1


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")
    ConfigurationManager.reset()

    assert get_config("completion.api_key") == "sk-env"
    assert get_config("completion.model") == "gpt-4o"


def test_custom_config_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("completion:\n  enabled: false\n", encoding="utf-8")

    ConfigurationManager(str(path))

    assert get_config("completion.enabled") is False
    assert get_config("acquisition.pdf.max_pages", 3) == 3


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigurationManager(str(tmp_path / "missing.yaml"))
