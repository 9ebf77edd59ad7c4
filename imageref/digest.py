"""Content digest values of the form ``algorithm:encoded``.

The reference parser only calls through this module; it never inspects the
encoded portion itself.
"""

import hashlib
import re
from dataclasses import dataclass

# Algorithms accepted in references, mapped to their hashlib names.
_ALGORITHMS = {
    "sha256": "sha256",
    "sha384": "sha384",
    "sha512": "sha512",
}

_DIGEST_FORMAT = re.compile(r"[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-zA-Z0-9=_-]+")
_LOWER_HEX = re.compile(r"[a-f0-9]+")

# DEFAULT_ALGORITHM is assumed for bare hexadecimal identifiers.
DEFAULT_ALGORITHM = "sha256"


class DigestError(ValueError):
    pass


def available_algorithms() -> list[str]:
    return sorted(_ALGORITHMS)


def encoded_length(algorithm: str) -> int:
    """Number of hex characters in an encoded digest for ``algorithm``."""
    if algorithm not in _ALGORITHMS:
        raise DigestError(f"unsupported digest algorithm: {algorithm}")
    return hashlib.new(_ALGORITHMS[algorithm]).digest_size * 2


@dataclass(frozen=True)
class Digest:
    algorithm: str
    encoded: str

    @classmethod
    def parse(cls, value: str) -> "Digest":
        """
        Parse and validate a digest string like 'sha256:<hex>'.

        Raises:
            DigestError: If the format is wrong, the algorithm is not
                supported or the encoded length does not match the algorithm
        """
        if not isinstance(value, str):
            raise DigestError(f"digest must be a string, not {type(value).__name__}")
        sep = value.find(":")
        if sep <= 0 or sep + 1 == len(value):
            raise DigestError(f"invalid checksum digest format: {value}")

        algorithm, encoded = value[:sep], value[sep + 1 :]
        if algorithm not in _ALGORITHMS:
            if _DIGEST_FORMAT.fullmatch(value) is None:
                raise DigestError(f"invalid checksum digest format: {value}")
            raise DigestError(f"unsupported digest algorithm: {algorithm}")

        if len(encoded) != encoded_length(algorithm):
            raise DigestError(f"invalid checksum digest length: {value}")
        if _LOWER_HEX.fullmatch(encoded) is None:
            raise DigestError(f"invalid checksum digest format: {value}")
        return cls(algorithm=algorithm, encoded=encoded)

    @classmethod
    def from_hex(cls, encoded: str, algorithm: str = DEFAULT_ALGORITHM) -> "Digest":
        return cls.parse(f"{algorithm}:{encoded}")

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.encoded}"


def parse_digest(value: "str | Digest") -> Digest:
    if isinstance(value, Digest):
        value = str(value)
    return Digest.parse(value)
