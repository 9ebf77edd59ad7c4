"""imageref: parse, normalize and match container image references."""

import sys

from imageref.digest import Digest, DigestError
from imageref.errors import (
    AmbiguousNameAsDigestError,
    DigestInvalidError,
    ImageReferenceError,
    InvalidReferenceFormatError,
    MatchPatternInvalidError,
    NameContainsUppercaseError,
    NameEmptyError,
    NameNotCanonicalError,
    NameTooLongError,
    ReferenceStateError,
    TagInvalidError,
)
from imageref.familiar import (
    familiar_name,
    familiar_string,
    is_name_only,
    parse_docker_ref,
    sort_references,
    tag_name_only,
)
from imageref.match import FamiliarPattern, familiar_match
from imageref.normalize import parse_any_reference, parse_named, parse_normalized_named, split_docker_domain
from imageref.reference import (
    CanonicalReference,
    DigestReference,
    Named,
    Reference,
    ReferenceKind,
    Repository,
    TaggedCanonicalReference,
    TaggedReference,
    domain,
    is_digested,
    is_named,
    is_tagged,
    parse,
    path,
    split_hostname,
    trim_named,
    with_digest,
    with_name,
    with_tag,
)

assert sys.version_info >= (3, 10), "Python 3.10 or greater is required."

__all__ = [
    "AmbiguousNameAsDigestError",
    "CanonicalReference",
    "Digest",
    "DigestError",
    "DigestInvalidError",
    "DigestReference",
    "FamiliarPattern",
    "ImageReferenceError",
    "InvalidReferenceFormatError",
    "MatchPatternInvalidError",
    "NameContainsUppercaseError",
    "NameEmptyError",
    "NameNotCanonicalError",
    "NameTooLongError",
    "Named",
    "Reference",
    "ReferenceKind",
    "ReferenceStateError",
    "Repository",
    "TagInvalidError",
    "TaggedCanonicalReference",
    "TaggedReference",
    "domain",
    "familiar_match",
    "familiar_name",
    "familiar_string",
    "is_digested",
    "is_name_only",
    "is_named",
    "is_tagged",
    "parse",
    "parse_any_reference",
    "parse_docker_ref",
    "parse_named",
    "parse_normalized_named",
    "path",
    "sort_references",
    "split_docker_domain",
    "split_hostname",
    "tag_name_only",
    "trim_named",
    "with_digest",
    "with_name",
    "with_tag",
]
