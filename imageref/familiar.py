"""Rendering references the way users type them, and the inverse."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from imageref.errors import ReferenceStateError
from imageref.grammar import get_grammar
from imageref.normalize import (
    get_default_domain,
    get_default_tag,
    get_official_repo_prefix,
    parse_any_reference,
    parse_normalized_named,
)
from imageref.reference import Named, Reference, ReferenceKind, with_tag

if TYPE_CHECKING:
    from imageref.config import Config, NormalizeConfig


def familiar_name(named: Named, config: Config | NormalizeConfig | None = None) -> str:
    """
    Return the shortest name that normalizes back to ``named``.

    Examples:
        docker.io/library/ubuntu -> "ubuntu"
        docker.io/nonlibrary/ubuntu -> "nonlibrary/ubuntu"
        docker.io/library/foo/bar -> "library/foo/bar"
        example.com/private/moonbase -> "example.com/private/moonbase"
        docker.io/foo.bar/baz -> "docker.io/foo.bar/baz"
        docker.io/library/<64 hex> -> "library/<64 hex>"
    """
    domain, path = named.domain, named.path
    if domain and domain != get_default_domain(config):
        return named.name

    grammar = get_grammar()
    familiar = path
    prefix = get_official_repo_prefix(config)
    if prefix and path.startswith(prefix):
        remainder = path[len(prefix) :]
        # A bare identifier would be rejected as ambiguous.
        if "/" not in remainder and not grammar.match_identifier(remainder):
            familiar = remainder

    # A domain-shaped first segment would be read back as the registry.
    head, sep, _ = familiar.partition("/")
    if sep and grammar.is_domain_shaped(head):
        return named.name
    return familiar


def familiar_suffix(ref: Reference) -> str:
    """The ':tag' and/or '@digest' part of a named reference."""
    match ref.kind:
        case ReferenceKind.REPOSITORY:
            return ""
        case ReferenceKind.TAGGED:
            return f":{ref.tag}"  # type: ignore[union-attr]
        case ReferenceKind.CANONICAL:
            return f"@{ref.digest}"  # type: ignore[union-attr]
        case ReferenceKind.TAGGED_CANONICAL:
            return f":{ref.tag}@{ref.digest}"  # type: ignore[union-attr]
        case ReferenceKind.DIGEST:
            return ""
    raise ReferenceStateError(ref.kind)


def familiar_string(ref: Reference, config: Config | NormalizeConfig | None = None) -> str:
    """Familiar rendering of any reference, keeping its tag and digest."""
    match ref.kind:
        case ReferenceKind.DIGEST:
            return str(ref)
        case ReferenceKind.REPOSITORY | ReferenceKind.TAGGED | ReferenceKind.CANONICAL | ReferenceKind.TAGGED_CANONICAL:
            return familiar_name(ref, config) + familiar_suffix(ref)  # type: ignore[arg-type]
    raise ReferenceStateError(ref.kind)


def is_name_only(ref: Reference) -> bool:
    """True when ``ref`` carries a name but neither tag nor digest."""
    return ref.kind is ReferenceKind.REPOSITORY


def tag_name_only(named: Named, config: Config | NormalizeConfig | None = None) -> Named:
    """Add the default tag to a name-only reference; anything else is returned as is."""
    if is_name_only(named):
        return with_tag(named, get_default_tag(config))
    return named


def parse_docker_ref(s: str, config: Config | NormalizeConfig | None = None) -> Named:
    """
    Normalize ``s`` and make sure it pins something.

    Examples:
        "busybox" -> docker.io/library/busybox:latest
        "busybox@sha256:..." -> docker.io/library/busybox@sha256:...
        "gcr.io/busybox:1.36@sha256:..." -> unchanged, the tag stays beside the digest
    """
    return tag_name_only(parse_normalized_named(s, config), config)


def _rank(ref: Reference) -> int:
    match ref.kind:
        case ReferenceKind.TAGGED_CANONICAL:
            return 1
        case ReferenceKind.TAGGED:
            return 2
        case ReferenceKind.CANONICAL:
            return 3
        case ReferenceKind.REPOSITORY:
            return 4
        case ReferenceKind.DIGEST:
            return 5
    raise ReferenceStateError(ref.kind)


def sort_references(references: Iterable[str], config: Config | NormalizeConfig | None = None) -> list[str]:
    """
    Order reference strings by how much they pin down, most specific first.

    Name+tag+digest, name+tag, name+digest, name, digest. Equal ranks sort by
    canonical string. Results are familiar strings; strings that do not parse
    are appended, sorted, as given.
    """
    parsed: list[Reference] = []
    bad: list[str] = []
    for s in references:
        try:
            parsed.append(parse_any_reference(s, config))
        except ValueError:
            bad.append(s)

    parsed.sort(key=lambda ref: (_rank(ref), str(ref)))
    return [familiar_string(ref, config) for ref in parsed] + sorted(bad)
