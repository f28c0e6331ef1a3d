"""Tests for the HMAC engine.

Tests cover:
- RFC 2202 HMAC-SHA1 test vectors
- Agreement with the stdlib hmac module
- Pad constants and key length checks
- Pluggable digest functions
"""

import hashlib
import hmac

import pytest

from s3v2sign.errors import PrimitiveFailure
from s3v2sign.hmac_engine import BLOCK_SIZE, DIGEST_SIZE, IPAD, OPAD, hmac_digest, sha1_digest
from s3v2sign.keys import normalize_key


# ---- RFC 2202 vectors ------------------------------------------------------

RFC2202_VECTORS = [
    (b"\x0b" * 20, b"Hi There", "b617318655057264e28bc0b6fb378c8ef146be00"),
    (b"Jefe", b"what do ya want for nothing?", "effcdf6ae5eb2fa2d27416d5f184df9c259a7c79"),
    (
        b"\xaa" * 80,
        b"Test Using Larger Than Block-Size Key - Hash Key First",
        "aa4ae5e15272d00e95705637ce8a3b55ed402112",
    ),
    (
        b"\xaa" * 80,
        b"Test Using Larger Than Block-Size Key and Larger Than One Block-Size Data",
        "e8e99d0f45237d786d6bbaa7965c7808bbff1a91",
    ),
]


class TestHmacDigest:
    """Tests for hmac_digest()."""

    @pytest.mark.parametrize("key,message,expected", RFC2202_VECTORS)
    def test_rfc2202_vectors(self, key, message, expected):
        """Published HMAC-SHA1 vectors match exactly."""
        assert hmac_digest(normalize_key(key), message).hex() == expected

    def test_empty_key_and_message(self):
        """HMAC of nothing with an empty key."""
        result = hmac_digest(normalize_key(b""), b"")
        assert result.hex() == "fbdb1d1b18aa6c08324b7d64b71fb76370690e1d"

    def test_exact_block_key(self):
        """A key of exactly one block is used as-is."""
        result = hmac_digest(normalize_key(b"k" * 64), b"abc")
        assert result.hex() == "7c44f6972fe89fcc6df413921b6e3616adffa964"

    def test_matches_stdlib_hmac(self):
        """The engine agrees with hmac.new for an AWS-style 40-byte secret."""
        secret = b"wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY"
        message = b"GET\n\n\nTue, 27 Mar 2007 19:36:42 +0000\n/johnsmith/photos/puppy.jpg"
        expected = hmac.new(secret, message, hashlib.sha1).digest()
        assert hmac_digest(normalize_key(secret), message) == expected

    def test_digest_length(self):
        """SHA-1 HMAC output is 20 bytes."""
        assert len(hmac_digest(normalize_key(b"key"), b"message")) == DIGEST_SIZE

    def test_rejects_unnormalized_key(self):
        """Keys that are not exactly one block are a programming error."""
        with pytest.raises(ValueError):
            hmac_digest(b"short", b"message")
        with pytest.raises(ValueError):
            hmac_digest(b"x" * (BLOCK_SIZE + 1), b"message")

    def test_custom_digest(self):
        """Any bytes -> bytes digest can be plugged in."""

        def sha256_digest(data: bytes) -> bytes:
            return hashlib.sha256(data).digest()

        key = normalize_key(b"secret", digest=sha256_digest)
        expected = hmac.new(b"secret", b"payload", hashlib.sha256).digest()
        assert hmac_digest(key, b"payload", sha256_digest) == expected

    def test_custom_block_size(self):
        """SHA-512 uses a 128-byte block; the key must match it."""

        def sha512_digest(data: bytes) -> bytes:
            return hashlib.sha512(data).digest()

        key = normalize_key(b"secret", digest=sha512_digest, block_size=128)
        expected = hmac.new(b"secret", b"payload", hashlib.sha512).digest()
        assert hmac_digest(key, b"payload", sha512_digest, block_size=128) == expected
        with pytest.raises(ValueError):
            hmac_digest(normalize_key(b"secret"), b"payload", sha512_digest, block_size=128)

    def test_pad_construction(self):
        """Inner and outer pads are applied in the RFC 2104 order."""
        calls = []

        def recording_digest(data: bytes) -> bytes:
            calls.append(data)
            return hashlib.sha1(data).digest()

        key = normalize_key(b"\x01")
        hmac_digest(key, b"m", recording_digest)

        assert len(calls) == 2
        inner, outer = calls
        assert inner[:BLOCK_SIZE] == bytes([0x01 ^ IPAD]) + bytes([IPAD]) * 63
        assert inner[BLOCK_SIZE:] == b"m"
        assert outer[:BLOCK_SIZE] == bytes([0x01 ^ OPAD]) + bytes([OPAD]) * 63
        assert outer[BLOCK_SIZE:] == hashlib.sha1(inner).digest()


class TestSha1Digest:
    """Tests for sha1_digest()."""

    def test_known_digest(self):
        assert sha1_digest(b"abc").hex() == "a9993e364706816aba3e25717850c26c9cd0d89d"

    def test_unavailable_sha1(self, monkeypatch):
        """A hashlib that refuses SHA-1 surfaces as PrimitiveFailure."""

        def refuse(*args, **kwargs):
            raise ValueError("unsupported hash type sha1")

        monkeypatch.setattr(hashlib, "sha1", refuse)
        with pytest.raises(PrimitiveFailure) as exc_info:
            sha1_digest(b"abc")
        assert exc_info.value.code == "PrimitiveFailure"
        assert exc_info.value.exit_status == 78
