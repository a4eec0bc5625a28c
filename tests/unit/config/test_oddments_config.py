"""Configuration loading: bundled defaults, user file, env overrides, schema."""
from __future__ import annotations

from pathlib import Path

import pytest

from oddments.core.config import ConfigManager, get_section, load_config
from oddments.core.config import manager as config_manager
from oddments.core.exceptions import ConfigurationError
from oddments.core.utils.merge import deep_merge


def test_bundled_defaults() -> None:
    cfg = ConfigManager().load_config()

    assert cfg["includer"]["max_nesting"] == 100
    assert cfg["includer"]["include_pattern"] == r'^%include\s"([^"]+)"'
    assert cfg["includer"]["allow_glob"] is False
    assert cfg["includer"]["sort_glob"] is True
    assert cfg["templates"]["safe"] is True
    assert cfg["zip"]["compression"] == "deflated"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("42", 42),
        ("true", True),
        ("FALSE", False),
        ("1.5", 1.5),
        ('["a", "b"]', ["a", "b"]),
        ("plain", "plain"),
        (r'^#include "(.+)" ', r'^#include "(.+)" '),
    ],
)
def test_env_values_are_coerced(monkeypatch: pytest.MonkeyPatch, raw: str, expected: object) -> None:
    monkeypatch.setenv("ODDMENTS_EXTRA__VALUE", raw)

    cfg = ConfigManager().load_config()

    assert cfg["extra"]["value"] == expected


def test_env_override_beats_user_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    user = tmp_path / "oddments.yaml"
    user.write_text("includer:\n  max_nesting: 7\n  sort_glob: false\n", encoding="utf-8")
    monkeypatch.setenv("ODDMENTS_CONFIG", str(user))
    monkeypatch.setenv("ODDMENTS_INCLUDER__MAX_NESTING", "9")

    section = get_section("includer")

    assert section["max_nesting"] == 9
    assert section["sort_glob"] is False
    assert section["allow_glob"] is False


def test_missing_user_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        ConfigManager(config_file=tmp_path / "absent.yaml").load_config()


def test_invalid_yaml_user_file(tmp_path: Path) -> None:
    user = tmp_path / "bad.yaml"
    user.write_text("includer: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file=user).load_config()


def test_non_mapping_user_file(tmp_path: Path) -> None:
    user = tmp_path / "list.yaml"
    user.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file=user).load_config()


@pytest.mark.parametrize(
    "key, value",
    [
        ("ODDMENTS_INCLUDER__MAX_NESTING", "0"),
        ("ODDMENTS_INCLUDER__ALLOW_GLOB", "sometimes"),
        ("ODDMENTS_INCLUDER__UNKNOWN", "1"),
        ("ODDMENTS_ZIP__COMPRESSION", "lzma"),
    ],
)
def test_schema_violations(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigurationError) as exc:
        ConfigManager().load_config()

    assert exc.value.context["errors"]


def test_malformed_env_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ODDMENTS_INCLUDER____MAX_NESTING", "3")

    with pytest.raises(ConfigurationError):
        ConfigManager().load_config()


def test_load_config_is_cached_per_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    first = load_config()
    assert load_config() is first

    monkeypatch.setenv("ODDMENTS_INCLUDER__MAX_NESTING", "12")
    second = load_config()

    assert second is not first
    assert second["includer"]["max_nesting"] == 12


def test_deep_merge_does_not_mutate_inputs() -> None:
    base = {"a": 1, "b": {"c": 2, "l": [1]}}
    override = {"b": {"d": 3, "l": [2]}}

    merged = deep_merge(base, override)

    assert merged == {"a": 1, "b": {"c": 2, "d": 3, "l": [2]}}
    assert base == {"a": 1, "b": {"c": 2, "l": [1]}}


def test_load_config_keeps_only_latest_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for depth in ("5", "6", "7"):
        monkeypatch.setenv("ODDMENTS_INCLUDER__MAX_NESTING", depth)
        assert load_config()["includer"]["max_nesting"] == int(depth)

    assert len(config_manager._config_cache) == 1
