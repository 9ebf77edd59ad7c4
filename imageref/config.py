import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from imageref.grammar import get_grammar
from imageref.layered_config import LayeredMixin
from imageref.log_levels import LogLevel, coerce_log_level
from imageref.logger import configure_logger
from imageref.toml_parser import TOMLParser

# DEFAULT_DOMAIN is the registry assumed for names without a domain, so that
# "ubuntu" normalizes to "docker.io/library/ubuntu".
DEFAULT_DOMAIN = "docker.io"

# LEGACY_DEFAULT_DOMAIN is accepted on input and rewritten to DEFAULT_DOMAIN.
LEGACY_DEFAULT_DOMAIN = "index.docker.io"

# OFFICIAL_REPO_PREFIX is the namespace of official images on DEFAULT_DOMAIN.
OFFICIAL_REPO_PREFIX = "library/"

# DEFAULT_TAG is applied when a reference names neither tag nor digest.
DEFAULT_TAG = "latest"

ENV_PREFIX = "IMAGEREF"
CONFIG_FILE_NAME = "imageref.conf"


def _get_default_config_dirs() -> list[Path]:
    """Get platform-appropriate config directories, lowest priority first."""
    dirs = [
        Path(f"{sys.prefix}/share/imageref"),
        Path(f"{sys.prefix}/local/share/imageref"),
    ]

    if os.name == 'nt':
        appdata = os.getenv("APPDATA", os.path.expanduser("~/AppData/Roaming"))
        dirs.append(Path(os.path.join(appdata, "imageref")))
    else:
        dirs.extend(
            [
                Path("/etc/imageref"),
                Path(os.path.expanduser(os.path.join(os.getenv("XDG_CONFIG_HOME", "~/.config"), "imageref"))),
            ]
        )

    return dirs


DEFAULT_CONFIG_DIRS = _get_default_config_dirs()


def coerce_to_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    raise ValueError(f"Cannot coerce {value!r} to a list of strings")


@dataclass
class NormalizeConfig:
    default_domain: str = DEFAULT_DOMAIN
    legacy_domains: list[str] = field(default_factory=lambda: [LEGACY_DEFAULT_DOMAIN])
    official_prefix: str = OFFICIAL_REPO_PREFIX
    default_tag: str = DEFAULT_TAG

    def __post_init__(self):
        grammar = get_grammar()

        if not grammar.match_domain(self.default_domain) or not grammar.is_domain_shaped(self.default_domain):
            raise ValueError(f"normalize.default_domain is not a registry domain: {self.default_domain!r}")

        self.legacy_domains = coerce_to_list(self.legacy_domains)
        for legacy in self.legacy_domains:
            if not grammar.match_domain(legacy):
                raise ValueError(f"normalize.legacy_domains holds an invalid domain: {legacy!r}")

        if self.official_prefix:
            namespace = self.official_prefix[:-1]
            if not self.official_prefix.endswith("/") or not grammar.match_remote_name(namespace):
                raise ValueError(f"normalize.official_prefix must be a path ending in '/': {self.official_prefix!r}")

        if not grammar.match_tag(self.default_tag):
            raise ValueError(f"normalize.default_tag is not a valid tag: {self.default_tag!r}")


@dataclass
class ImagerefSettings:
    """These settings are not managed directly by the user"""

    config_files: list[str] | None = None


@dataclass
class BaseConfig:
    normalize: NormalizeConfig = field(default_factory=NormalizeConfig)
    log_level: LogLevel | None = None
    settings: ImagerefSettings = field(default_factory=ImagerefSettings)

    def __post_init__(self):
        self.log_level = coerce_log_level(self.log_level) if self.log_level is not None else self.log_level


class Config(LayeredMixin, BaseConfig):
    """
    Config combining configuration layers over the BaseConfig defaults.
    Exposes the same attributes as BaseConfig. Mixins should be inherited first.
    """

    def configure_logging(self) -> None:
        if self.log_level is not None:
            configure_logger(self.log_level)


def load_file_config() -> dict[str, Any]:
    parser = TOMLParser()
    config_path = os.getenv(f"{ENV_PREFIX}_CONFIG")

    if config_path and os.path.exists(config_path):
        config = parser.parse_file(config_path).get("imageref", {})
        config['settings'] = {'config_files': [config_path]}
        return config

    config_paths = []
    for conf_dir in DEFAULT_CONFIG_DIRS:
        path = conf_dir / CONFIG_FILE_NAME
        if path.exists():
            config_paths.append(str(path))
            parser.parse_file(path)
        drop_in_dir = Path(f"{path}.d")
        if drop_in_dir.is_dir():
            for conf_file in sorted(drop_in_dir.glob("*.conf")):
                config_paths.append(str(conf_file))
                parser.parse_file(conf_file)

    config = parser.data.get("imageref", {})
    if config_paths:
        config['settings'] = {'config_files': config_paths}
    return config


def load_env_config(env: Mapping[str, str] | None = None) -> dict[str, Any]:
    """
    Collect IMAGEREF_* variables into a config layer.

    A double underscore descends into a table, so
    IMAGEREF_NORMALIZE__DEFAULT_DOMAIN sets normalize.default_domain.
    """
    if env is None:
        env = os.environ

    config: dict[str, Any] = {}
    for k, v in env.items():
        if not k.startswith(f"{ENV_PREFIX}_") or k == f"{ENV_PREFIX}_CONFIG":
            continue

        subkeys = k[len(ENV_PREFIX) + 1 :].split("__")

        subconf = config
        for key in subkeys[:-1]:
            subconf = subconf.setdefault(key.lower(), {})

        subconf[subkeys[-1].lower()] = v

    normalize = config.get("normalize")
    if isinstance(normalize, dict) and "legacy_domains" in normalize:
        normalize["legacy_domains"] = coerce_to_list(normalize["legacy_domains"])
    return config


def default_config(env: Mapping[str, str] | None = None) -> Config:
    """Returns a Config with the environment layered over config files."""
    return Config(load_env_config(env), load_file_config())
