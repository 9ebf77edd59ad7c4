"""Exceptions raised while parsing, building and matching image references."""


class ImageReferenceError(ValueError):
    """Base class for every rejected reference input."""

    reason = "invalid reference"

    def __init__(self, value: str = "", detail: str | None = None):
        self.value = value
        self.detail = detail
        super().__init__(str(self))

    def __str__(self):
        message = self.reason
        if self.detail:
            message = f"{message}: {self.detail}"
        if self.value:
            message = f"{message} ({self.value!r})"
        return message


class NameEmptyError(ImageReferenceError):
    reason = "repository name must have at least one component"


class NameTooLongError(ImageReferenceError):
    reason = "repository name must not be more than 255 characters"


class NameContainsUppercaseError(ImageReferenceError):
    reason = "repository name must be lowercase"


class InvalidReferenceFormatError(ImageReferenceError):
    reason = "invalid reference format"


class TagInvalidError(ImageReferenceError):
    reason = "invalid tag format"


class DigestInvalidError(ImageReferenceError):
    reason = "invalid digest format"


class AmbiguousNameAsDigestError(ImageReferenceError):
    reason = "cannot specify 64-byte hexadecimal strings as a repository name"


class NameNotCanonicalError(ImageReferenceError):
    reason = "repository name must be canonical"


class MatchPatternInvalidError(ImageReferenceError):
    reason = "syntax error in pattern"


class ReferenceStateError(RuntimeError):
    """Raised when a reference of this kind cannot serve the operation.

    A name accessor given a digest-only reference raises it, and so does any
    dispatch that meets an unknown kind, which indicates a defect in imageref.
    """

    def __init__(self, kind, detail: str | None = None):
        self.kind = kind
        super().__init__(f"{detail or 'unhandled reference kind'}: {kind!r}")
