import logging

import pytest

from replout.replout_config import ConfigError, ReploutConfig, load_config


def test_defaults():
    cfg = ReploutConfig()
    assert cfg.chunk_range == 100
    assert cfg.max_depth == 32
    assert cfg.lexer == "python"
    assert cfg.logging_level == logging.WARNING


def test_from_mapping_normalises_keys_and_ignores_unknown():
    cfg = ReploutConfig.from_mapping({"chunk-range": "50", "theme": "default", "colour": "blue"})
    assert cfg.chunk_range == 50
    assert cfg.theme == "default"


def test_from_mapping_none():
    assert ReploutConfig.from_mapping(None) == ReploutConfig()


@pytest.mark.parametrize(
    "cfg, key",
    [
        ({"chunk_range": "lots"}, "chunk_range"),
        ({"chunk_range": 0}, "chunk_range"),
        ({"max_depth": -1}, "max_depth"),
        ({"log_level": "chatty"}, "log_level"),
    ],
    ids=["not_int", "zero_range", "negative_depth", "bad_level"],
)
def test_invalid_values(cfg, key):
    with pytest.raises(ConfigError) as info:
        ReploutConfig.from_mapping(cfg)
    assert info.value.key == key


def test_log_level_is_case_insensitive():
    assert ReploutConfig.from_mapping({"log-level": "debug"}).logging_level == logging.DEBUG


def test_load_yaml(tmp_path):
    path = tmp_path / "replout.yaml"
    path.write_text("chunk-range: 20\nexpand-depth: 2\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.chunk_range == 20
    assert cfg.expand_depth == 2


def test_load_toml_section(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text('[replout]\nmax_depth = 4\ntheme = "native"\n', encoding="utf-8")
    cfg = load_config(path)
    assert cfg.max_depth == 4
    assert cfg.theme == "native"


def test_load_json(tmp_path):
    path = tmp_path / "c.json"
    path.write_text('{"indent_width": 4}', encoding="utf-8")
    assert load_config(str(path)).indent_width == 4


def test_load_empty_yaml(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ReploutConfig()


def test_load_rejects_unknown_extension(tmp_path):
    path = tmp_path / "c.ini"
    path.write_text("x=1", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_load_rejects_non_mapping(tmp_path):
    path = tmp_path / "c.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)
