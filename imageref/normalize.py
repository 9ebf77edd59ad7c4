"""imageref normalize module.

This module applies Docker's distribution/reference normalization rules:
"familiar" names gain the default domain and, for single component names,
the official repository namespace.

    ubuntu                          -> docker.io/library/ubuntu
    myrepo/myimage:v1.0             -> docker.io/myrepo/myimage:v1.0
    index.docker.io/library/ubuntu  -> docker.io/library/ubuntu
    localhost:5000/myimage          -> localhost:5000/myimage
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from imageref.config import DEFAULT_DOMAIN, DEFAULT_TAG, LEGACY_DEFAULT_DOMAIN, OFFICIAL_REPO_PREFIX, NormalizeConfig
from imageref.digest import DEFAULT_ALGORITHM, Digest, DigestError
from imageref.errors import (
    AmbiguousNameAsDigestError,
    NameContainsUppercaseError,
    NameEmptyError,
    NameNotCanonicalError,
)
from imageref.grammar import Captures, get_grammar
from imageref.logger import logger
from imageref.reference import DigestReference, Named, Reference, from_captures

if TYPE_CHECKING:
    from imageref.config import Config


def _settings(config: Config | NormalizeConfig) -> NormalizeConfig:
    if isinstance(config, NormalizeConfig):
        return config
    return config.normalize


def get_default_domain(config: Config | NormalizeConfig | None = None) -> str:
    """Get the registry used for names that carry no domain.

    Args:
        config: Optional Config object to check for domain overrides

    Returns:
        The default domain to use for image normalization
    """
    if config is None:
        return DEFAULT_DOMAIN
    return _settings(config).default_domain


def get_legacy_domains(config: Config | NormalizeConfig | None = None) -> list[str]:
    """Get the domains accepted on input as aliases of the default domain."""
    if config is None:
        return [LEGACY_DEFAULT_DOMAIN]
    return list(_settings(config).legacy_domains)


def get_official_repo_prefix(config: Config | NormalizeConfig | None = None) -> str:
    """Get the namespace given to single component names on the default domain.

    Args:
        config: Optional Config object to check for prefix overrides

    Returns:
        The official repository prefix, including its trailing '/'
    """
    if config is None:
        return OFFICIAL_REPO_PREFIX
    return _settings(config).official_prefix


def get_default_tag(config: Config | NormalizeConfig | None = None) -> str:
    """Get the tag applied when a reference names neither tag nor digest."""
    if config is None:
        return DEFAULT_TAG
    return _settings(config).default_tag


def split_docker_domain(name: str, config: Config | NormalizeConfig | None = None) -> tuple[str, str]:
    """
    Split ``name`` into a registry domain and the remainder.

    The leading segment is the domain only when it looks like one (see
    Grammar.is_domain_shaped); otherwise the default domain is used. Legacy
    aliases collapse to the default domain, and a single component on the
    default domain gains the official namespace.

    Args:
        name: A reference string, optionally carrying a tag and/or digest
        config: Optional Config object for domain/prefix overrides

    Returns:
        The (domain, remainder) pair; the remainder keeps any tag/digest
    """
    default_domain = get_default_domain(config)

    i = name.find("/")
    if i == -1 or not get_grammar().is_domain_shaped(name[:i]):
        domain, remainder = default_domain, name
    else:
        domain, remainder = name[:i], name[i + 1 :]

    if domain in get_legacy_domains(config):
        domain = default_domain
    if domain == default_domain and "/" not in remainder:
        remainder = get_official_repo_prefix(config) + remainder
    return domain, remainder


def _check_ambiguous(s: str) -> None:
    """Reject a bare 64 character hex name, which reads as an image ID."""
    name = s.split("@", 1)[0]
    colon = name.find(":")
    if colon != -1:
        name = name[:colon]
    if "/" not in name and get_grammar().match_identifier(name):
        raise AmbiguousNameAsDigestError(s)


def parse_normalized_named(s: str, config: Config | NormalizeConfig | None = None) -> Named:
    """
    Parse a possibly familiar string into a fully qualified Named reference.

    Examples:
        "ubuntu" -> docker.io/library/ubuntu
        "myrepo/myimage:v1.0" -> docker.io/myrepo/myimage:v1.0
        "registry.example.com/myimage" -> registry.example.com/myimage

    Raises:
        AmbiguousNameAsDigestError: If ``s`` is a bare 64 character hex name
        ImageReferenceError: For any other grammar violation
    """
    if not s:
        raise NameEmptyError(s)
    try:
        _check_ambiguous(s)
    except AmbiguousNameAsDigestError:
        logger.debug(f"Rejected ambiguous reference {s!r}")
        raise

    grammar = get_grammar()
    domain, remainder = split_docker_domain(s, config)
    raw = grammar.capture(remainder)
    remote_name = raw.name

    if remote_name.lower() != remote_name:
        logger.debug(f"Rejected reference {s!r}: uppercase in {remote_name!r}")
        raise NameContainsUppercaseError(s, f"repository name ({remote_name}) must be lowercase")

    captures = Captures(domain=domain, path=remote_name, tag=raw.tag, digest=raw.digest)
    try:
        return from_captures(captures, s)
    except ValueError as exc:
        logger.debug(f"Rejected reference {s!r}: {exc}")
        raise


def parse_named(s: str, config: Config | NormalizeConfig | None = None) -> Named:
    """Parse ``s``, which must already be in its fully qualified form."""
    named = parse_normalized_named(s, config)
    if str(named) != s:
        raise NameNotCanonicalError(s, f"normalizes to {named}")
    return named


def parse_any_reference(s: str, config: Config | NormalizeConfig | None = None) -> Reference:
    """
    Parse ``s`` as a digest-only reference when it is one, else as a normalized name.

    A bare 64 character hex string is taken as a sha256 digest.
    """
    grammar = get_grammar()
    if grammar.match_identifier(s):
        return DigestReference(digest=Digest.from_hex(s, DEFAULT_ALGORITHM))
    try:
        return DigestReference(digest=Digest.parse(s))
    except DigestError:
        pass
    return parse_normalized_named(s, config)
