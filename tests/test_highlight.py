"""
Tests for fuzzy fragment relocation.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class TestNormalization:
    """Test the anchor normalization rule."""

    def test_keeps_letters_digits_cjk(self):
        from page_recon.utils.highlight import normalize_for_anchor

        assert normalize_for_anchor("Hello, World! 42 中文。") == "helloworld42中文"

    def test_anchor_truncated(self):
        from page_recon.utils.highlight import make_anchor

        anchor = make_anchor("a" * 80)

        assert len(anchor) == 50

    def test_custom_length(self):
        from page_recon.utils.highlight import make_anchor

        assert make_anchor("Layout Reconstruction", 10) == "layoutreco"


class TestLocateAnchor:
    """Test locating a fragment in page text."""

    def test_finds_fragment_despite_formatting(self):
        """Punctuation, case and line breaks do not matter."""
        from page_recon.utils.highlight import locate_anchor

        page = "Intro text. The Quick-brown\nfox jumps. Tail."
        match = locate_anchor(page, "the quick brown fox")

        assert match is not None
        assert page[match.start:match.end] == "The Quick-brown\nfox"
        assert match.skipped == 0

    def test_retry_skips_noisy_prefix(self):
        """A garbled start is tolerated on long anchors."""
        from page_recon.utils.highlight import locate_anchor

        page = "Results show the reconstruction preserves order."
        match = locate_anchor(page, "XXXXXthe reconstruction preserves")

        assert match is not None
        assert match.skipped == 5
        assert page[match.start:match.end] == "the reconstruction preserves"

    def test_short_anchor_not_retried(self):
        from page_recon.utils.highlight import locate_anchor

        assert locate_anchor("nothing here", "zzzz word") is None

    def test_too_short(self):
        from page_recon.utils.highlight import locate_anchor

        assert locate_anchor("a b c", "!") is None

    def test_not_found(self):
        from page_recon.utils.highlight import locate_anchor

        assert locate_anchor("Some page text.", "completely different content") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
