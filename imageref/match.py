"""Glob matching of references by their familiar form.

    *        one or more characters inside a path segment
    **       zero or more whole segments ("foo/**/bar"), one or more at the end
    ?        exactly one character inside a path segment
    [a-z]    character class, "[^...]" negates; never matches '/'
    \\c       the literal character c

A ':' or '@' in the last segment starts the suffix part of a pattern, which is
matched against the reference's tag and digest. Patterns without one match the
name alone, whatever the reference is tagged with.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from imageref.errors import MatchPatternInvalidError, ReferenceStateError
from imageref.familiar import familiar_name, familiar_suffix
from imageref.grammar import anchored
from imageref.reference import Reference, ReferenceKind

if TYPE_CHECKING:
    from imageref.config import Config, NormalizeConfig

SEGMENT_CHAR = "[^/]"


class TokenType(Enum):
    LITERAL = "literal"
    SEPARATOR = "/"
    STAR = "*"
    GLOBSTAR = "**"
    ANY = "?"
    CLASS = "[]"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str = ""
    escaped: bool = False


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise MatchPatternInvalidError(pattern, "bad character range")
    if pattern[i] == "\\":
        i += 1
        if i >= len(pattern):
            raise MatchPatternInvalidError(pattern, "trailing escape in character class")
    return pattern[i], i + 1


def _parse_class(pattern: str, start: int) -> tuple[Token, int]:
    """Parse the class opening at ``start``; returns its token and the index past ']'."""
    i = start + 1
    negate = i < len(pattern) and pattern[i] == "^"
    if negate:
        i += 1

    ranges = []
    while True:
        if i >= len(pattern):
            raise MatchPatternInvalidError(pattern, "unterminated character class")
        if pattern[i] == "]" and ranges:
            i += 1
            break
        lo, i = _class_char(pattern, i)
        hi = lo
        if i < len(pattern) and pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1)
            if hi < lo:
                raise MatchPatternInvalidError(pattern, f"reversed character range {lo}-{hi}")
        ranges.append((lo, hi))

    body = "".join(re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}" for lo, hi in ranges)
    if negate:
        return Token(TokenType.CLASS, f"[^{body}/]"), i
    return Token(TokenType.CLASS, f"(?!/)[{body}]"), i


def tokenize(pattern: str) -> list[Token]:
    tokens: list[Token] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            if i + 1 >= len(pattern):
                raise MatchPatternInvalidError(pattern, "trailing escape")
            ch = pattern[i + 1]
            kind = TokenType.SEPARATOR if ch == "/" else TokenType.LITERAL
            tokens.append(Token(kind, ch, escaped=True))
            i += 2
        elif ch == "*":
            j = i
            while j < len(pattern) and pattern[j] == "*":
                j += 1
            tokens.append(Token(TokenType.GLOBSTAR if j - i > 1 else TokenType.STAR))
            i = j
        elif ch == "[":
            token, i = _parse_class(pattern, i)
            tokens.append(token)
        else:
            kind = {"/": TokenType.SEPARATOR, "?": TokenType.ANY}.get(ch, TokenType.LITERAL)
            tokens.append(Token(kind, ch))
            i += 1
    return tokens


def split_suffix(tokens: list[Token]) -> tuple[list[Token], list[Token]]:
    """Split at the first unescaped ':' or '@' following the last '/'."""
    last_sep = max((i for i, t in enumerate(tokens) if t.type is TokenType.SEPARATOR), default=-1)
    for i in range(last_sep + 1, len(tokens)):
        token = tokens[i]
        if token.type is TokenType.LITERAL and not token.escaped and token.value in ":@":
            return tokens[:i], tokens[i:]
    return tokens, []


def translate(tokens: list[Token]) -> str:
    parts = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.type is TokenType.GLOBSTAR:
            starts_segment = i == 0 or tokens[i - 1].type is TokenType.SEPARATOR
            at_end = i + 1 == len(tokens)
            if starts_segment and at_end:
                parts.append(f"{SEGMENT_CHAR}+(?:/{SEGMENT_CHAR}+)*")
            elif starts_segment and tokens[i + 1].type is TokenType.SEPARATOR:
                parts.append(f"(?:{SEGMENT_CHAR}+/)*")
                i += 1
            else:
                parts.append(f"{SEGMENT_CHAR}+")
        elif token.type is TokenType.STAR:
            parts.append(f"{SEGMENT_CHAR}+")
        elif token.type is TokenType.ANY:
            parts.append(SEGMENT_CHAR)
        elif token.type is TokenType.CLASS:
            parts.append(token.value)
        else:
            parts.append(re.escape(token.value))
        i += 1
    return anchored(*parts)


@dataclass(frozen=True)
class FamiliarPattern:
    pattern: str
    name: re.Pattern
    suffix: re.Pattern | None
    whole: re.Pattern

    @classmethod
    def compile(cls, pattern: str) -> "FamiliarPattern":
        """
        Compile ``pattern`` into anchored matchers.

        Raises:
            MatchPatternInvalidError: If the pattern is malformed, e.g. '[-x]'
        """
        tokens = tokenize(pattern)
        name_tokens, suffix_tokens = split_suffix(tokens)
        return cls(
            pattern=pattern,
            name=re.compile(translate(name_tokens)),
            suffix=re.compile(translate(suffix_tokens)) if suffix_tokens else None,
            whole=re.compile(translate(tokens)),
        )

    def matches(self, ref: Reference, config: Config | NormalizeConfig | None = None) -> bool:
        match ref.kind:
            case ReferenceKind.DIGEST:
                return self.whole.fullmatch(str(ref)) is not None
            case ReferenceKind.REPOSITORY | ReferenceKind.TAGGED | ReferenceKind.CANONICAL | ReferenceKind.TAGGED_CANONICAL:
                if self.name.fullmatch(familiar_name(ref, config)) is None:  # type: ignore[arg-type]
                    return False
                if self.suffix is None:
                    return True
                return self.suffix.fullmatch(familiar_suffix(ref)) is not None
        raise ReferenceStateError(ref.kind)


def familiar_match(pattern: str, ref: Reference, config: Config | NormalizeConfig | None = None) -> bool:
    """
    Report whether ``ref``'s familiar form matches the glob ``pattern``.

    The pattern is compiled on every call.

    Raises:
        MatchPatternInvalidError: If the pattern is malformed; a well formed
            pattern that does not match returns False
    """
    return FamiliarPattern.compile(pattern).matches(ref, config)
