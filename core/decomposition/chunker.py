"""Paragraph-aligned chunking for documents too large for one model call.

Text is split on blank-line paragraph boundaries (``"\\n\\n"``) and paragraphs
are packed greedily into chunks no longer than the bound. Joining the chunks
with ``"\\n\\n"`` gives back the original text exactly.
"""

from dataclasses import dataclass

PARAGRAPH_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class Chunk:
    """One bounded slice of a document."""
    index: int  # 0-based
    total: int
    text: str

    @property
    def label(self) -> str:
        return f"chunk {self.index + 1} of {self.total}"


def split_into_chunks(text: str, max_chunk_size: int) -> list[str]:
    """Split ``text`` into paragraph-aligned chunks of at most ``max_chunk_size`` characters.

    A paragraph longer than the bound is not cut: it becomes a chunk of its
    own and is the only way a chunk can exceed the bound.

    Args:
        text: Full extracted document text.
        max_chunk_size: Maximum characters per chunk, separators included.

    Returns:
        The chunks in document order; empty for empty text.

    Raises:
        ValueError: If ``max_chunk_size`` is below 1.
    """
    if max_chunk_size < 1:
        raise ValueError("max_chunk_size must be at least 1")
    if not text:
        return []

    chunks: list[str] = []
    current: list[str] = []
    current_len = 0

    for paragraph in text.split(PARAGRAPH_SEPARATOR):
        if not current:
            current = [paragraph]
            current_len = len(paragraph)
            continue

        added_len = len(PARAGRAPH_SEPARATOR) + len(paragraph)
        if current_len + added_len > max_chunk_size:
            chunks.append(PARAGRAPH_SEPARATOR.join(current))
            current = [paragraph]
            current_len = len(paragraph)
        else:
            current.append(paragraph)
            current_len += added_len

    chunks.append(PARAGRAPH_SEPARATOR.join(current))
    return chunks


def build_chunks(text: str, max_chunk_size: int) -> list[Chunk]:
    """Split ``text`` and label each piece with its position."""
    pieces = split_into_chunks(text, max_chunk_size)
    return [Chunk(index=i, total=len(pieces), text=piece) for i, piece in enumerate(pieces)]
