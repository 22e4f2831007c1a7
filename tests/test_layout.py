"""
Tests for column detection and line assembly.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_token(text, x, y, width=100.0, height=10.0):
    from page_recon.utils.tokens import Token
    return Token(text, x, y, width, height)


def two_column_tokens(rows=5):
    """Left column at x=50, right column at x=350 on a 600-wide page."""
    tokens = []
    for i in range(rows):
        tokens.append(make_token(f"L{i}", 50, 100 + 20 * i))
        tokens.append(make_token(f"R{i}", 350, 100 + 20 * i))
    return tokens


class TestDetectColumns:
    """Test the two-column decision."""

    def test_balanced_sides_are_two_columns(self):
        """Both sides above 30% of tokens."""
        from page_recon.utils.layout import detect_columns

        layout = detect_columns(two_column_tokens(), page_width=600)

        assert layout.num_columns == 2
        assert layout.left_count == 5
        assert layout.right_count == 5
        assert layout.center_count == 0
        assert sum(layout.histogram) == 10

    def test_center_mass_keeps_single_column(self):
        """Centered text (titles, full-width body) stays single-column."""
        from page_recon.utils.layout import detect_columns

        tokens = [make_token("t", 250, 100 + 15 * i) for i in range(10)]
        tokens += [make_token("l", 20, 300), make_token("r", 450, 300)]

        assert detect_columns(tokens, page_width=600).num_columns == 1

    def test_lopsided_page_is_single_column(self):
        """A few right-side tokens are not enough for a second column."""
        from page_recon.utils.layout import detect_columns

        tokens = [make_token("l", 50, 100 + 15 * i) for i in range(9)]
        tokens.append(make_token("r", 350, 100))

        assert detect_columns(tokens, page_width=600).num_columns == 1

    def test_force_single_column(self):
        """Column detection can be switched off."""
        from page_recon.config import LayoutConfig
        from page_recon.utils.layout import detect_columns

        config = LayoutConfig(force_single_column=True)

        assert detect_columns(two_column_tokens(), 600, config).num_columns == 1

    def test_empty(self):
        """No tokens means one (empty) column."""
        from page_recon.utils.layout import detect_columns

        layout = detect_columns([], page_width=600)

        assert layout.num_columns == 1
        assert layout.total == 0


class TestAssignColumn:
    """Test per-token column assignment."""

    def test_split_at_half_width(self):
        from page_recon.utils.layout import assign_column

        assert assign_column(make_token("a", 0, 100, width=100), 600) == 0
        assert assign_column(make_token("b", 320, 100, width=100), 600) == 1

    def test_single_column_always_zero(self):
        from page_recon.utils.layout import assign_column

        assert assign_column(make_token("b", 400, 100), 600, num_columns=1) == 0


class TestLineBuilder:
    """Test the streaming line reducer."""

    def test_groups_within_tolerance(self):
        """Tokens within 4 units share a line and are sorted by x."""
        from page_recon.utils.layout import LineBuilder

        builder = LineBuilder(4.0)
        assert builder.push(make_token("world", 200, 100)) is None
        assert builder.push(make_token("Hello", 10, 102)) is None

        line = builder.flush()
        assert line.text == "Hello world"
        assert line.bottom == 102

    def test_push_returns_closed_line(self):
        """A token beyond tolerance closes the current line."""
        from page_recon.utils.layout import LineBuilder

        builder = LineBuilder(4.0)
        builder.push(make_token("first", 10, 100))
        closed = builder.push(make_token("second", 10, 115))

        assert closed is not None
        assert closed.text == "first"
        assert builder.flush().text == "second"
        assert builder.flush() is None

    def test_height_relative_tolerance(self):
        """With no fixed tolerance, half the token height is used."""
        from page_recon.utils.layout import LineBuilder

        builder = LineBuilder(None)
        builder.push(make_token("a", 10, 100, height=20))

        assert builder.push(make_token("b", 200, 108, height=20)) is None
        assert builder.push(make_token("c", 10, 125, height=20)) is not None


class TestSegmentColumns:
    """Test full column segmentation."""

    def test_left_column_read_before_right(self):
        """Every left line precedes every right line."""
        from page_recon.utils.layout import segment_columns

        columns, layout = segment_columns(two_column_tokens(), page_width=600)

        assert layout.num_columns == 2
        assert [c.index for c in columns] == [0, 1]
        assert [line.text for line in columns[0].lines] == ["L0", "L1", "L2", "L3", "L4"]
        assert [line.text for line in columns[1].lines] == ["R0", "R1", "R2", "R3", "R4"]

    def test_center_band_tokens_partitioned_once(self):
        """Every token lands in exactly one column, center-band ones included."""
        from collections import Counter
        from page_recon.utils.layout import assign_column, segment_columns

        left_mid = make_token("MidL", 270, 200, width=40)   # cx = 290
        right_mid = make_token("MidR", 300, 220, width=40)  # cx = 320
        tokens = two_column_tokens() + [left_mid, right_mid]

        columns, layout = segment_columns(tokens, page_width=600)

        assert layout.num_columns == 2
        assert layout.center_count == 2
        assert Counter(t for c in columns for t in c.tokens) == Counter(tokens)
        assert assign_column(left_mid, 600) == 0
        assert assign_column(right_mid, 600) == 1
        assert left_mid in columns[0].tokens
        assert right_mid in columns[1].tokens

    def test_single_column_lines_top_to_bottom(self):
        """Lines come out sorted by y."""
        from page_recon.utils.layout import segment_columns

        tokens = [
            make_token("third", 10, 140),
            make_token("first", 10, 100),
            make_token("second", 10, 120),
        ]
        columns, _ = segment_columns(tokens, page_width=600)

        assert len(columns) == 1
        assert [line.text for line in columns[0].lines] == ["first", "second", "third"]

    def test_line_gaps(self):
        """Gaps are measured between consecutive tokens."""
        from page_recon.utils.layout import assemble_lines

        lines = assemble_lines([
            make_token("a", 0, 100, width=10),
            make_token("b", 100, 100, width=10),
            make_token("c", 250, 100, width=10),
        ])

        assert len(lines) == 1
        assert lines[0].gaps == [90, 140]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
