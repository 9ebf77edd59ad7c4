"""Grammar for image references.

    reference       := name [ ":" tag ] [ "@" digest ]
    name            := [domain '/'] remote-name
    domain          := host [':' port-number] | '[' ipv6 ']' ':' port-number
    host            := domain-name-component ['.' domain-name-component]*
    remote-name     := path-component ['/' path-component]*
    path-component  := alpha-numeric [separator alpha-numeric]*
    alpha-numeric   := /[a-z0-9]+/
    separator       := /[_.]|__|[-]+/
    tag             := /[\\w][\\w.-]{0,127}/
    digest          := algorithm ":" encoded

Fragments are plain pattern strings composed with the helpers below and
compiled once into a read-only Grammar.
"""

import re
import threading
from dataclasses import dataclass
from typing import NamedTuple

from imageref.errors import (
    DigestInvalidError,
    InvalidReferenceFormatError,
    NameContainsUppercaseError,
    NameEmptyError,
    NameTooLongError,
    TagInvalidError,
)

# NAME_TOTAL_LENGTH_MAX is the maximum length of domain and path together.
NAME_TOTAL_LENGTH_MAX = 255

LOCALHOST = "localhost"


def literal(s: str) -> str:
    return re.escape(s)


def expression(*fragments: str) -> str:
    return "".join(fragments)


def group(*fragments: str) -> str:
    return f"(?:{expression(*fragments)})"


def optional(*fragments: str) -> str:
    return f"{group(*fragments)}?"


def repeated(*fragments: str) -> str:
    return f"{group(*fragments)}+"


def any_times(*fragments: str) -> str:
    return f"{group(*fragments)}*"


def capture(*fragments: str) -> str:
    return f"({expression(*fragments)})"


def anchored(*fragments: str) -> str:
    return f"^{expression(*fragments)}$"


ALPHANUMERIC = r"[a-z0-9]+"
SEPARATOR = r"(?:[._]|__|[-]+)"
PATH_COMPONENT = expression(ALPHANUMERIC, any_times(SEPARATOR, ALPHANUMERIC))
REMOTE_NAME = expression(PATH_COMPONENT, any_times(literal("/"), PATH_COMPONENT))

DOMAIN_NAME_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
DOMAIN_NAME = expression(DOMAIN_NAME_COMPONENT, any_times(literal("."), DOMAIN_NAME_COMPONENT))
PORT = expression(literal(":"), r"[0-9]+")
# Bracketed literals only; zone ids and dotted IPv4 tails never match.
IPV6_ADDRESS = r"\[[a-fA-F0-9:]+\]"
DOMAIN = group(DOMAIN_NAME, optional(PORT), "|", IPV6_ADDRESS, PORT)

TAG = r"[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}"
DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*[:][0-9a-fA-F]{32,}"
IDENTIFIER = r"[a-f0-9]{64}"


class Captures(NamedTuple):
    """Raw boundaries of a reference string; tag and digest are None when absent."""

    domain: str
    path: str
    tag: str | None
    digest: str | None

    @property
    def name(self) -> str:
        if self.domain:
            return f"{self.domain}/{self.path}"
        return self.path


@dataclass(frozen=True)
class Grammar:
    tag: re.Pattern
    digest: re.Pattern
    domain: re.Pattern
    path_component: re.Pattern
    remote_name: re.Pattern
    identifier: re.Pattern

    @classmethod
    def compile(cls) -> "Grammar":
        return cls(
            tag=re.compile(anchored(TAG)),
            digest=re.compile(anchored(DIGEST)),
            domain=re.compile(anchored(DOMAIN)),
            path_component=re.compile(anchored(PATH_COMPONENT)),
            remote_name=re.compile(anchored(REMOTE_NAME)),
            identifier=re.compile(anchored(IDENTIFIER)),
        )

    def match_tag(self, s: str) -> bool:
        return self.tag.fullmatch(s) is not None

    def match_digest(self, s: str) -> bool:
        return self.digest.fullmatch(s) is not None

    def match_domain(self, s: str) -> bool:
        return self.domain.fullmatch(s) is not None

    def match_path_component(self, s: str) -> bool:
        return self.path_component.fullmatch(s) is not None

    def match_remote_name(self, s: str) -> bool:
        return self.remote_name.fullmatch(s) is not None

    def match_identifier(self, s: str) -> bool:
        return self.identifier.fullmatch(s) is not None

    @staticmethod
    def is_domain_shaped(segment: str) -> bool:
        """
        Whether a leading segment names a registry rather than a path component.

        Uppercase is never valid in a path component, so a segment carrying
        it can only be a domain.
        """
        return "." in segment or ":" in segment or segment == LOCALHOST or segment.lower() != segment

    def split_name(self, name: str) -> tuple[str, str]:
        i = name.find("/")
        if i == -1:
            return "", name
        head = name[:i]
        if self.is_domain_shaped(head):
            return head, name[i + 1 :]
        return "", name

    def capture(self, s: str) -> Captures:
        """
        Split a reference string into domain, path, tag and digest.

        The digest separator is the rightmost '@' and the tag separator the
        rightmost ':' after the last '/', so ports never read as tags.
        """
        name, digest = s, None
        at = s.rfind("@")
        if at != -1:
            name, digest = s[:at], s[at + 1 :]

        tag = None
        colon = name.rfind(":")
        if colon > name.rfind("/"):
            name, tag = name[:colon], name[colon + 1 :]

        domain, path = self.split_name(name)
        return Captures(domain=domain, path=path, tag=tag, digest=digest)

    def validate_name(self, domain: str, path: str, value: str = "") -> None:
        if not domain and not path:
            raise NameEmptyError(value)
        if domain and not self.match_domain(domain):
            raise InvalidReferenceFormatError(value, f"invalid domain {domain!r}")
        if not self.match_remote_name(path):
            if self.match_remote_name(path.lower()):
                raise NameContainsUppercaseError(value)
            raise InvalidReferenceFormatError(value)
        if len(domain) + len(path) + (1 if domain else 0) > NAME_TOTAL_LENGTH_MAX:
            raise NameTooLongError(value)

    def validate(self, captures: Captures, value: str = "") -> None:
        """
        Check every captured part, raising the error for the first rule broken.

        Raises:
            NameEmptyError, InvalidReferenceFormatError, NameContainsUppercaseError,
            NameTooLongError, TagInvalidError, DigestInvalidError
        """
        self.validate_name(captures.domain, captures.path, value)
        if captures.tag is not None and not self.match_tag(captures.tag):
            raise TagInvalidError(value)
        if captures.digest is not None and not self.match_digest(captures.digest):
            raise DigestInvalidError(value)


_grammar: Grammar | None = None
_grammar_lock = threading.Lock()


def get_grammar() -> Grammar:
    global _grammar

    if _grammar is None:
        with _grammar_lock:
            if _grammar is None:
                _grammar = Grammar.compile()
    return _grammar
