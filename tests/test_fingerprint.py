"""
Tests for fingerprint module.
"""

import hashlib

import pytest

from jokester.dedup.fingerprint import (
    FALLBACK_PAD_VALUE,
    Fingerprinter,
    content_hash,
    fallback_embedding,
)


class TestContentHash:
    """Tests for content_hash function."""

    def test_md5_hex_digest(self):
        """Should be the MD5 hex digest of the normalized text."""
        expected = hashlib.md5("why did the chicken cross the road?".encode("utf-8")).hexdigest()
        assert content_hash("Why did the chicken cross the road?") == expected
        assert len(content_hash("anything")) == 32

    @pytest.mark.parametrize("text", [
        "Another Synergy Slide",
        "  padded joke  ",
        "\tMIXED case\n",
        "already normal",
    ])
    def test_normalization_invariant(self, text):
        """content_hash(t) should equal content_hash(t.lower().strip())."""
        assert content_hash(text) == content_hash(text.lower().strip())

    def test_different_texts_differ(self):
        """Distinct jokes should hash differently."""
        assert content_hash("joke one") != content_hash("joke two")

    def test_inner_whitespace_is_significant(self):
        """Only leading/trailing whitespace is normalized."""
        assert content_hash("pie  chart") != content_hash("pie chart")


class TestFallbackEmbedding:
    """Tests for fallback_embedding function."""

    def test_deterministic(self):
        """Same text should give the same vector every time."""
        assert fallback_embedding("Oh great, another synergy slide") == \
            fallback_embedding("Oh great, another synergy slide")

    def test_case_insensitive(self):
        """The digest is taken over the lower-cased text."""
        assert fallback_embedding("PIE CHARTS") == fallback_embedding("pie charts")

    def test_distinct_texts_give_distinct_vectors(self):
        """Different texts should give different vectors."""
        assert fallback_embedding("joke one") != fallback_embedding("joke two")

    def test_length_is_half_the_dimensions(self):
        """One value per hex pair walked with step 2."""
        assert len(fallback_embedding("text", 768)) == 384
        assert len(fallback_embedding("text", 16)) == 8

    def test_values_follow_digest_then_pad(self):
        """Values come from the SHA-256 digest, then the pad value."""
        digest = hashlib.sha256("text".encode("utf-8")).hexdigest()
        vec = fallback_embedding("text", 768)

        assert vec[0] == (int(digest[0:2], 16) - 128) / 128
        assert vec[1] == (int(digest[2:4], 16) - 128) / 128
        # 64 hex chars cover indices 0..62 step 2 -> 32 values
        assert all(v == FALLBACK_PAD_VALUE for v in vec[32:])

    def test_value_range(self):
        """Every value should be in [-1, 1)."""
        vec = fallback_embedding("range check", 128)
        assert all(-1.0 <= v < 1.0 for v in vec)


class TestFingerprinter:
    """Tests for Fingerprinter class."""

    async def test_uses_embedding_service(self, make_embedder):
        """Should return the service vector on success."""
        embedder = make_embedder(vectors={"hello": [0.1, 0.2, 0.3]})
        fingerprinter = Fingerprinter(embedder, dimensions=16)

        assert await fingerprinter.embed("hello") == [0.1, 0.2, 0.3]
        assert embedder.calls == ["hello"]
        assert fingerprinter.fallback_count == 0

    async def test_falls_back_on_service_failure(self, make_embedder):
        """Service errors should never escape."""
        fingerprinter = Fingerprinter(make_embedder(fail=True), dimensions=16)

        vec = await fingerprinter.embed("hello")

        assert vec == fallback_embedding("hello", 16)
        assert fingerprinter.fallback_count == 1

    async def test_falls_back_without_service(self):
        """No configured service should use the fallback directly."""
        fingerprinter = Fingerprinter(None, dimensions=16)

        assert await fingerprinter.embed("hello") == fallback_embedding("hello", 16)
        assert fingerprinter.fallback_count == 1
