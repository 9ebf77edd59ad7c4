"""Reference values and the strict parser.

A reference is one of five frozen variants, told apart by ``kind``:

    DigestReference           sha256:7cc4b5aefd1d...
    Repository                docker.io/library/busybox
    TaggedReference           docker.io/library/busybox:latest
    CanonicalReference        docker.io/library/busybox@sha256:7cc4b5aefd1d...
    TaggedCanonicalReference  docker.io/library/busybox:latest@sha256:7cc4b5aefd1d...

``parse`` assigns no defaults; see ``imageref.normalize`` for the familiar
docker rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from imageref.digest import Digest, DigestError, parse_digest
from imageref.errors import DigestInvalidError, ReferenceStateError, TagInvalidError
from imageref.grammar import Captures, get_grammar
from imageref.logger import logger


class ReferenceKind(Enum):
    DIGEST = "digest"
    REPOSITORY = "repository"
    TAGGED = "tagged"
    CANONICAL = "canonical"
    TAGGED_CANONICAL = "tagged+canonical"


NAMED_KINDS = frozenset(
    {ReferenceKind.REPOSITORY, ReferenceKind.TAGGED, ReferenceKind.CANONICAL, ReferenceKind.TAGGED_CANONICAL}
)
TAGGED_KINDS = frozenset({ReferenceKind.TAGGED, ReferenceKind.TAGGED_CANONICAL})
DIGESTED_KINDS = frozenset({ReferenceKind.DIGEST, ReferenceKind.CANONICAL, ReferenceKind.TAGGED_CANONICAL})


@dataclass(frozen=True)
class DigestReference:
    digest: Digest

    kind: ClassVar[ReferenceKind] = ReferenceKind.DIGEST

    def __str__(self) -> str:
        return str(self.digest)


@dataclass(frozen=True)
class Repository:
    domain: str
    path: str

    kind: ClassVar[ReferenceKind] = ReferenceKind.REPOSITORY

    @property
    def repository(self) -> Repository:
        return self

    @property
    def name(self) -> str:
        if self.domain:
            return f"{self.domain}/{self.path}"
        return self.path

    def __str__(self) -> str:
        return self.name


class _NamedMixin:
    repository: Repository

    @property
    def domain(self) -> str:
        return self.repository.domain

    @property
    def path(self) -> str:
        return self.repository.path

    @property
    def name(self) -> str:
        return self.repository.name


@dataclass(frozen=True)
class TaggedReference(_NamedMixin):
    repository: Repository
    tag: str

    kind: ClassVar[ReferenceKind] = ReferenceKind.TAGGED

    def __str__(self) -> str:
        return f"{self.name}:{self.tag}"


@dataclass(frozen=True)
class CanonicalReference(_NamedMixin):
    repository: Repository
    digest: Digest

    kind: ClassVar[ReferenceKind] = ReferenceKind.CANONICAL

    def __str__(self) -> str:
        return f"{self.name}@{self.digest}"


@dataclass(frozen=True)
class TaggedCanonicalReference(_NamedMixin):
    repository: Repository
    tag: str
    digest: Digest

    kind: ClassVar[ReferenceKind] = ReferenceKind.TAGGED_CANONICAL

    def __str__(self) -> str:
        return f"{self.name}:{self.tag}@{self.digest}"


Named = Repository | TaggedReference | CanonicalReference | TaggedCanonicalReference
Reference = DigestReference | Named


def is_named(ref: Reference) -> bool:
    return ref.kind in NAMED_KINDS


def is_tagged(ref: Reference) -> bool:
    return ref.kind in TAGGED_KINDS


def is_digested(ref: Reference) -> bool:
    return ref.kind in DIGESTED_KINDS


def _require_named(ref: Reference) -> Named:
    """
    Return ``ref`` when it carries a name.

    Raises:
        ReferenceStateError: If ``ref`` is a digest-only reference
    """
    if ref.kind not in NAMED_KINDS:
        raise ReferenceStateError(ref.kind, f"reference {ref} has no name")
    return ref  # type: ignore[return-value]


def domain(named: Named) -> str:
    return _require_named(named).domain


def path(named: Named) -> str:
    return _require_named(named).path


def split_hostname(named: Named) -> tuple[str, str]:
    """Return the domain and the remote name of ``named``."""
    named = _require_named(named)
    return named.domain, named.path


def tag_of(ref: Reference) -> str | None:
    match ref.kind:
        case ReferenceKind.TAGGED | ReferenceKind.TAGGED_CANONICAL:
            return ref.tag  # type: ignore[union-attr]
        case ReferenceKind.DIGEST | ReferenceKind.REPOSITORY | ReferenceKind.CANONICAL:
            return None
    raise ReferenceStateError(ref.kind)


def digest_of(ref: Reference) -> Digest | None:
    match ref.kind:
        case ReferenceKind.DIGEST | ReferenceKind.CANONICAL | ReferenceKind.TAGGED_CANONICAL:
            return ref.digest  # type: ignore[union-attr]
        case ReferenceKind.REPOSITORY | ReferenceKind.TAGGED:
            return None
    raise ReferenceStateError(ref.kind)


def _parse_digest(value: str | Digest, reference: str = "") -> Digest:
    try:
        return parse_digest(value)
    except DigestError as exc:
        raise DigestInvalidError(reference or str(value), str(exc)) from exc


def build(repository: Repository, tag: str | None = None, digest: Digest | None = None) -> Named:
    """Return the narrowest variant holding what is present."""
    if tag is None and digest is None:
        return repository
    if digest is None:
        return TaggedReference(repository=repository, tag=tag)  # type: ignore[arg-type]
    if tag is None:
        return CanonicalReference(repository=repository, digest=digest)
    return TaggedCanonicalReference(repository=repository, tag=tag, digest=digest)


def from_captures(captures: Captures, value: str = "") -> Named:
    """Validate captured parts and assemble them into a reference."""
    get_grammar().validate(captures, value)
    digest = _parse_digest(captures.digest, value) if captures.digest is not None else None
    repository = Repository(domain=captures.domain, path=captures.path)
    return build(repository, captures.tag, digest)


def parse(s: str) -> Reference:
    """
    Parse ``s`` strictly into a reference without applying any defaults.

    A string that holds nothing but a supported 'algorithm:hex' digest
    yields a DigestReference.

    Raises:
        ImageReferenceError: The subclass names the rule that was broken
    """
    if "/" not in s and "@" not in s:
        try:
            return DigestReference(digest=Digest.parse(s))
        except DigestError:
            pass

    captures = get_grammar().capture(s)
    try:
        return from_captures(captures, s)
    except ValueError as exc:
        logger.debug(f"Rejected reference {s!r}: {exc}")
        raise


def with_name(name: str) -> Repository:
    """Return a Repository for ``name``, which must carry no tag or digest."""
    grammar = get_grammar()
    domain, path = grammar.split_name(name)
    grammar.validate_name(domain, path, name)
    return Repository(domain=domain, path=path)


def with_tag(named: Named, tag: str) -> Named:
    """Return a copy of ``named`` carrying ``tag``; an existing digest is kept."""
    named = _require_named(named)
    if not get_grammar().match_tag(tag):
        raise TagInvalidError(tag)
    match named.kind:
        case ReferenceKind.CANONICAL | ReferenceKind.TAGGED_CANONICAL:
            return TaggedCanonicalReference(repository=named.repository, tag=tag, digest=named.digest)  # type: ignore[union-attr]
        case ReferenceKind.REPOSITORY | ReferenceKind.TAGGED:
            return TaggedReference(repository=named.repository, tag=tag)
    raise ReferenceStateError(named.kind)


def with_digest(named: Named, digest: str | Digest) -> Named:
    """Return a copy of ``named`` carrying ``digest``; an existing tag is kept."""
    named = _require_named(named)
    if not get_grammar().match_digest(str(digest)):
        raise DigestInvalidError(str(digest))
    dgst = _parse_digest(digest)
    match named.kind:
        case ReferenceKind.TAGGED | ReferenceKind.TAGGED_CANONICAL:
            return TaggedCanonicalReference(repository=named.repository, tag=named.tag, digest=dgst)  # type: ignore[union-attr]
        case ReferenceKind.REPOSITORY | ReferenceKind.CANONICAL:
            return CanonicalReference(repository=named.repository, digest=dgst)
    raise ReferenceStateError(named.kind)


def trim_named(named: Named) -> Repository:
    """Drop any tag or digest from ``named``."""
    return _require_named(named).repository
