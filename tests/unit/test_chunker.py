"""Unit tests for paragraph-aligned chunking.

Tests cover:
- Reconstruction: joining the chunks with a blank line gives the input back
- Size bound, with the oversized-paragraph exception
- Empty input and invalid bounds
- Chunk labels
"""

import pytest

from core.decomposition.chunker import PARAGRAPH_SEPARATOR, build_chunks, split_into_chunks


def make_document(paragraph_sizes: list[int]) -> str:
    return PARAGRAPH_SEPARATOR.join(chr(ord("a") + i % 26) * size for i, size in enumerate(paragraph_sizes))


class TestSplitIntoChunks:
    """Tests for split_into_chunks."""

    @pytest.mark.parametrize(
        "text,bound",
        [
            ("single paragraph", 100),
            (make_document([10, 20, 30, 40]), 35),
            (make_document([5] * 50), 17),
            ("a\n\n\n\nb", 3),  # empty paragraph in the middle
            ("\n\nleading and trailing\n\n", 5),
            ("x" * 500, 10),
        ],
    )
    def test_join_reconstructs_text(self, text: str, bound: int) -> None:
        """Test that joining chunks with the separator gives back the input."""
        chunks = split_into_chunks(text, bound)
        assert PARAGRAPH_SEPARATOR.join(chunks) == text

    def test_chunks_respect_bound(self) -> None:
        """Test that every multi-paragraph chunk fits the bound, separators included."""
        text = make_document([12, 7, 30, 3, 3, 3, 25, 18, 9])
        for chunk in split_into_chunks(text, 30):
            assert len(chunk) <= 30

    def test_oversized_paragraph_is_kept_whole(self) -> None:
        """Test that a paragraph longer than the bound becomes its own chunk."""
        text = make_document([10, 100, 10])
        chunks = split_into_chunks(text, 50)

        assert len(chunks) == 3
        assert len(chunks[1]) == 100
        assert PARAGRAPH_SEPARATOR not in chunks[1]

    def test_greedy_packing(self) -> None:
        """Test that paragraphs are packed while they fit."""
        # 10 + 2 + 10 = 22 fits in 22; the third paragraph starts a new chunk
        text = make_document([10, 10, 10])
        chunks = split_into_chunks(text, 22)

        assert len(chunks) == 2
        assert len(chunks[0]) == 22
        assert len(chunks[1]) == 10

    def test_separator_counts_towards_bound(self) -> None:
        """Test that the separator length is included in the bound."""
        text = make_document([10, 10])
        assert len(split_into_chunks(text, 21)) == 2
        assert len(split_into_chunks(text, 22)) == 1

    def test_short_text_is_one_chunk(self) -> None:
        """Test that text under the bound is returned unchanged."""
        text = "Clause one.\n\nClause two."
        assert split_into_chunks(text, 50_000) == [text]

    def test_empty_text_yields_no_chunks(self) -> None:
        """Test that the empty string gives no chunks."""
        assert split_into_chunks("", 100) == []

    @pytest.mark.parametrize("bound", [0, -5])
    def test_invalid_bound_rejected(self, bound: int) -> None:
        """Test that a bound below 1 is rejected."""
        with pytest.raises(ValueError):
            split_into_chunks("text", bound)


class TestBuildChunks:
    """Tests for labelled chunks."""

    def test_chunks_are_numbered(self) -> None:
        """Test index, total and label of built chunks."""
        chunks = build_chunks(make_document([10, 10, 10]), 12)

        assert [chunk.index for chunk in chunks] == [0, 1, 2]
        assert all(chunk.total == 3 for chunk in chunks)
        assert chunks[1].label == "chunk 2 of 3"
