import hashlib

import pytest

from imageref.digest import Digest, DigestError, available_algorithms, encoded_length, parse_digest

SHA256 = hashlib.sha256(b"imageref").hexdigest()
SHA512 = hashlib.sha512(b"imageref").hexdigest()


def test_available_algorithms():
    assert available_algorithms() == ["sha256", "sha384", "sha512"]


@pytest.mark.parametrize("algorithm,length", [("sha256", 64), ("sha384", 96), ("sha512", 128)])
def test_encoded_length(algorithm, length):
    assert encoded_length(algorithm) == length


def test_encoded_length_unknown_algorithm():
    with pytest.raises(DigestError):
        encoded_length("md5")


def test_parse_round_trip():
    d = Digest.parse(f"sha256:{SHA256}")
    assert d.algorithm == "sha256"
    assert d.encoded == SHA256
    assert str(d) == f"sha256:{SHA256}"


def test_parse_sha512():
    assert str(Digest.parse(f"sha512:{SHA512}")) == f"sha512:{SHA512}"


def test_from_hex_defaults_to_sha256():
    assert Digest.from_hex(SHA256) == Digest("sha256", SHA256)


@pytest.mark.parametrize(
    "value,message",
    [
        ("", "format"),
        ("sha256", "format"),
        (":abc", "format"),
        ("sha256:", "format"),
        (f"sha256:{SHA256[:-1]}", "length"),
        (f"sha256:{SHA256.upper()}", "format"),
        (f"sha256:{'g' * 64}", "format"),
        (f"sha512:{SHA256}", "length"),
        (f"md5:{SHA256}", "unsupported"),
        ("not a digest:!!", "format"),
    ],
)
def test_parse_rejects(value, message):
    with pytest.raises(DigestError, match=message):
        Digest.parse(value)


def test_parse_digest_revalidates_instances():
    with pytest.raises(DigestError):
        parse_digest(Digest("sha256", "abc"))


def test_parse_digest_rejects_non_strings():
    with pytest.raises(DigestError):
        parse_digest(42)


def test_digest_is_hashable():
    assert len({Digest.parse(f"sha256:{SHA256}"), Digest.from_hex(SHA256)}) == 1
