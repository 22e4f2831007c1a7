"""
Tests for token normalization and coalescing.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_token(text, x, y=100.0, width=5.0, height=10.0, explicit_break=False):
    from page_recon.utils.tokens import Token
    return Token(text, x, y, width, height, explicit_break)


class TestNormalizeTokens:
    """Test coordinate flipping and band filtering."""

    def test_flips_y_axis(self):
        """Native bottom-left y becomes top-left y."""
        from page_recon.utils.tokens import RawRun, normalize_tokens

        tokens = normalize_tokens([RawRun("Hello", 10, 700, 30, 10)], page_height=800)

        assert len(tokens) == 1
        assert tokens[0].y == 100
        assert tokens[0].x == 10
        assert tokens[0].text == "Hello"

    def test_header_band_excluded(self):
        """A token at 2% of page height is dropped."""
        from page_recon.utils.tokens import RawRun, normalize_tokens

        runs = [
            RawRun("Running header", 50, 1000 - 20, 100, 10),
            RawRun("Body", 50, 1000 - 500, 40, 10),
        ]
        tokens = normalize_tokens(runs, page_height=1000)

        assert [t.text for t in tokens] == ["Body"]
        assert tokens[0].y == 500

    def test_footer_band_excluded(self):
        """A token below the footer fraction is dropped."""
        from page_recon.utils.tokens import RawRun, normalize_tokens

        tokens = normalize_tokens([RawRun("12", 300, 1000 - 960, 10, 10)], page_height=1000)

        assert tokens == []

    def test_custom_bands(self):
        """Band fractions come from the config."""
        from page_recon.config import LayoutConfig
        from page_recon.utils.tokens import RawRun, normalize_tokens

        config = LayoutConfig(header_fraction=0.0, footer_fraction=1.0)
        tokens = normalize_tokens([RawRun("Top", 0, 990, 10, 10)], 1000, config)

        assert len(tokens) == 1

    def test_whitespace_runs_dropped_and_text_trimmed(self):
        """Empty and whitespace-only runs are discarded."""
        from page_recon.utils.tokens import RawRun, normalize_tokens

        runs = [
            RawRun("   ", 10, 500, 5, 10),
            RawRun("", 20, 500, 0, 10),
            RawRun("  hi ", 30, 500, 10, 10),
        ]
        tokens = normalize_tokens(runs, page_height=1000)

        assert [t.text for t in tokens] == ["hi"]

    def test_negative_width_clamped(self):
        """Widths are never negative."""
        from page_recon.utils.tokens import RawRun, normalize_tokens

        tokens = normalize_tokens([RawRun("x", 10, 500, -3, 10)], page_height=1000)

        assert tokens[0].width == 0

    def test_explicit_break_carried(self):
        """The engine's end-of-line flag becomes explicit_break."""
        from page_recon.utils.tokens import RawRun, normalize_tokens

        tokens = normalize_tokens([RawRun("end", 10, 500, 15, 10, has_eol=True)], 1000)

        assert tokens[0].explicit_break is True

    def test_empty_input(self):
        """No runs yields no tokens."""
        from page_recon.utils.tokens import normalize_tokens

        assert normalize_tokens([], page_height=1000) == []

    def test_raw_run_from_dict(self):
        """Runs load from plain dicts."""
        from page_recon.utils.tokens import RawRun

        run = RawRun.from_dict({"text": "a", "x": 1, "y": 2, "width": 3, "height": 4,
                                "explicit_break": True})

        assert run == RawRun("a", 1.0, 2.0, 3.0, 4.0, True)


class TestCoalesceTokens:
    """Test merging of glyph-level fragments."""

    def test_per_glyph_runs_merge(self):
        """Touching glyph runs become one word."""
        from page_recon.utils.tokens import coalesce_tokens

        glyphs = [make_token(c, 5.0 * i) for i, c in enumerate("algo")]
        merged = coalesce_tokens(glyphs)

        assert len(merged) == 1
        assert merged[0].text == "algo"
        assert merged[0].x == 0
        assert merged[0].width == 20

    def test_word_gap_inserts_space(self):
        """A small but visible gap merges with a single space."""
        from page_recon.utils.tokens import coalesce_tokens

        merged = coalesce_tokens([
            make_token("Hello", 0, width=25),
            make_token("world", 28, width=25),
        ])

        assert len(merged) == 1
        assert merged[0].text == "Hello world"
        assert merged[0].width == 53

    def test_wide_gap_not_merged(self):
        """Fragments further apart than half a height stay separate."""
        from page_recon.utils.tokens import coalesce_tokens

        merged = coalesce_tokens([make_token("a", 0), make_token("b", 100)])

        assert [t.text for t in merged] == ["a", "b"]

    def test_different_lines_not_merged(self):
        """Vertically separated fragments stay separate."""
        from page_recon.utils.tokens import coalesce_tokens

        merged = coalesce_tokens([make_token("up", 0, y=100), make_token("down", 5, y=120)])

        assert [t.text for t in merged] == ["up", "down"]

    def test_explicit_break_stops_merge(self):
        """An explicit line break closes the accumulator."""
        from page_recon.utils.tokens import coalesce_tokens

        merged = coalesce_tokens([
            make_token("foo", 0, width=15, explicit_break=True),
            make_token("bar", 15, width=15),
        ])

        assert [t.text for t in merged] == ["foo", "bar"]

    def test_unsorted_input_is_ordered(self):
        """Fragments are merged in reading order regardless of input order."""
        from page_recon.utils.tokens import coalesce_tokens

        merged = coalesce_tokens([
            make_token("c", 10, y=101),
            make_token("a", 0, y=100),
            make_token("b", 5, y=99),
        ])

        assert [t.text for t in merged] == ["abc"]

    def test_empty(self):
        """Nothing to coalesce."""
        from page_recon.utils.tokens import coalesce_tokens

        assert coalesce_tokens([]) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
