import os
from unittest.mock import patch

import pytest

from imageref.config import (
    CONFIG_FILE_NAME,
    Config,
    NormalizeConfig,
    coerce_to_list,
    default_config,
    load_env_config,
    load_file_config,
)
from imageref.log_levels import LogLevel


@pytest.fixture
def no_config_files():
    with patch.dict(os.environ, {}, clear=True), patch("imageref.config.DEFAULT_CONFIG_DIRS", []):
        yield


def test_correct_config_defaults(no_config_files):
    cfg = default_config({})

    assert cfg.normalize.default_domain == "docker.io"
    assert cfg.normalize.legacy_domains == ["index.docker.io"]
    assert cfg.normalize.official_prefix == "library/"
    assert cfg.normalize.default_tag == "latest"
    assert cfg.log_level is None
    assert cfg.settings.config_files is None


def test_config_defaults_not_set(no_config_files):
    cfg = default_config({})

    assert cfg.is_set("normalize") is False
    assert cfg.is_set("log_level") is False


def test_empty_layers():
    cfg = Config()
    assert cfg.normalize == NormalizeConfig()


def test_file_config_overrides_defaults():
    mock_file_config = {"normalize": {"default_domain": "quay.io", "official_prefix": "ramalama/"}}

    with patch("imageref.config.load_file_config", return_value=mock_file_config):
        with patch("imageref.config.load_env_config", return_value={}):
            cfg = default_config()
            assert cfg.normalize.default_domain == "quay.io"
            assert cfg.normalize.official_prefix == "ramalama/"
            assert cfg.normalize.default_tag == "latest"
            assert cfg.is_set("normalize") is True


def test_env_overrides_file_and_default():
    mock_file_config = {"normalize": {"default_domain": "quay.io", "default_tag": "stable"}}
    mock_env_config = {"normalize": {"default_domain": "registry.example.com"}}

    with patch("imageref.config.load_file_config", return_value=mock_file_config):
        with patch("imageref.config.load_env_config", return_value=mock_env_config):
            cfg = default_config()
            assert cfg.normalize.default_domain == "registry.example.com"
            assert cfg.normalize.default_tag == "stable"


def test_unknown_keys_are_ignored():
    cfg = Config({"transport": "ollama", "normalize": {"default_tag": "v1"}})
    assert cfg.normalize.default_tag == "v1"
    assert not hasattr(cfg, "transport")


class TestNormalizeConfigValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_domain": "-bad"},
            {"default_domain": "docker"},
            {"legacy_domains": ["[fc00::1]"]},
            {"official_prefix": "library"},
            {"official_prefix": "Library/"},
            {"default_tag": "-latest"},
        ],
    )
    def test_rejects(self, kwargs):
        with pytest.raises(ValueError):
            NormalizeConfig(**kwargs)

    def test_empty_prefix_allowed(self):
        assert NormalizeConfig(official_prefix="").official_prefix == ""

    def test_legacy_domains_from_string(self):
        assert NormalizeConfig(legacy_domains="a.io, b.io").legacy_domains == ["a.io", "b.io"]

    def test_invalid_layer_value(self):
        with pytest.raises(ValueError):
            Config({"normalize": {"default_tag": "not a tag"}})


@pytest.mark.parametrize(
    "value,expected",
    [
        ("a,b", ["a", "b"]),
        (" a , ,b ", ["a", "b"]),
        ("", []),
        (["a", "b"], ["a", "b"]),
        (("a",), ["a"]),
    ],
)
def test_coerce_to_list(value, expected):
    assert coerce_to_list(value) == expected


def test_coerce_to_list_rejects():
    with pytest.raises(ValueError):
        coerce_to_list(42)


class TestLoadEnvConfig:
    """Test the load_env_config function."""

    def test_load_env_config_nested_variables(self):
        env = {
            "IMAGEREF_NORMALIZE__DEFAULT_DOMAIN": "quay.io",
            "IMAGEREF_NORMALIZE__DEFAULT_TAG": "stable",
        }
        assert load_env_config(env) == {"normalize": {"default_domain": "quay.io", "default_tag": "stable"}}

    def test_load_env_config_basic_variables(self):
        assert load_env_config({"IMAGEREF_LOG_LEVEL": "debug"}) == {"log_level": "debug"}

    def test_load_env_config_legacy_domains_list(self):
        env = {"IMAGEREF_NORMALIZE__LEGACY_DOMAINS": "index.docker.io,registry-1.docker.io"}
        result = load_env_config(env)
        assert result["normalize"]["legacy_domains"] == ["index.docker.io", "registry-1.docker.io"]

    def test_load_env_config_ignores_other_vars(self):
        env = {"PATH": "/usr/bin", "IMAGEREFX": "1", "IMAGEREF_CONFIG": "/etc/imageref.conf"}
        assert load_env_config(env) == {}

    def test_load_env_config_empty_environment(self):
        assert load_env_config({}) == {}

    def test_load_env_config_none_environment(self):
        with patch.dict(os.environ, {"IMAGEREF_LOG_LEVEL": "info"}, clear=True):
            assert load_env_config() == {"log_level": "info"}

    def test_load_env_config_case_insensitive_keys(self):
        assert load_env_config({"IMAGEREF_Normalize__Default_Tag": "v1"}) == {"normalize": {"default_tag": "v1"}}


class TestLoadFileConfig:
    def test_explicit_config_file(self, tmp_path):
        conf = tmp_path / "custom.conf"
        conf.write_text('[imageref]\nlog_level = "debug"\n\n[imageref.normalize]\ndefault_domain = "quay.io"\n')

        with patch.dict(os.environ, {"IMAGEREF_CONFIG": str(conf)}, clear=True):
            result = load_file_config()

        assert result == {
            "log_level": "debug",
            "normalize": {"default_domain": "quay.io"},
            "settings": {"config_files": [str(conf)]},
        }

    def test_config_dirs_and_drop_ins(self, tmp_path):
        low, high = tmp_path / "low", tmp_path / "high"
        low.mkdir()
        high.mkdir()
        (low / CONFIG_FILE_NAME).write_text('[imageref.normalize]\ndefault_domain = "low.io"\ndefault_tag = "low"\n')
        (high / CONFIG_FILE_NAME).write_text('[imageref.normalize]\ndefault_domain = "high.io"\n')
        drop_in = high / f"{CONFIG_FILE_NAME}.d"
        drop_in.mkdir()
        (drop_in / "10-tag.conf").write_text('[imageref.normalize]\ndefault_tag = "dropin"\n')

        with patch.dict(os.environ, {}, clear=True), patch("imageref.config.DEFAULT_CONFIG_DIRS", [low, high]):
            cfg = default_config({})

        assert cfg.normalize.default_domain == "high.io"
        assert cfg.normalize.default_tag == "dropin"
        assert cfg.settings.config_files == [
            str(low / CONFIG_FILE_NAME),
            str(high / CONFIG_FILE_NAME),
            str(drop_in / "10-tag.conf"),
        ]

    def test_no_files(self, no_config_files):
        assert load_file_config() == {}


class TestConfigIntegration:
    def test_config_with_nested_env_variables(self, no_config_files):
        cfg = default_config({"IMAGEREF_NORMALIZE__OFFICIAL_PREFIX": "official/"})
        assert cfg.normalize.official_prefix == "official/"
        assert cfg.normalize.default_domain == "docker.io"

    def test_config_env_overrides_file_config(self, tmp_path):
        conf = tmp_path / "imageref.conf"
        conf.write_text('[imageref.normalize]\ndefault_domain = "file.io"\ndefault_tag = "file"\n')

        with patch.dict(os.environ, {"IMAGEREF_CONFIG": str(conf)}, clear=True):
            cfg = default_config({"IMAGEREF_NORMALIZE__DEFAULT_DOMAIN": "env.io"})

        assert cfg.normalize.default_domain == "env.io"
        assert cfg.normalize.default_tag == "file"

    @pytest.mark.parametrize("value", ["debug", "DEBUG", "10", 10, LogLevel.DEBUG])
    def test_log_level_coercion(self, value):
        assert Config({"log_level": value}).log_level is LogLevel.DEBUG

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            Config({"log_level": "verbose"})

    def test_configure_logging(self):
        cfg = Config({"log_level": "info"})
        with patch("imageref.config.configure_logger") as configure:
            cfg.configure_logging()
        configure.assert_called_once_with(LogLevel.INFO)

    def test_configure_logging_unset(self):
        with patch("imageref.config.configure_logger") as configure:
            Config().configure_logging()
        configure.assert_not_called()
