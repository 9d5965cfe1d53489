"""Unit tests for the chunker module."""

from __future__ import annotations

import pytest

from conftest import word_count
from scoped_rag.config import ChunkerConfig
from scoped_rag.ingestion.chunker import TextChunker
from scoped_rag.retrieval.models import Fragment


def _words(n: int, prefix: str = "w") -> str:
    return " ".join(f"{prefix}{i}" for i in range(n))


@pytest.fixture()
def chunker() -> TextChunker:
    return TextChunker(ChunkerConfig(chunk_size=100, chunk_overlap=10), token_counter=word_count)


def test_long_fragment_is_split(chunker: TextChunker) -> None:
    chunks = chunker.chunk([Fragment(text=_words(450))])
    assert len(chunks) > 1
    assert all(word_count(c.text) <= 100 for c in chunks)


def test_adjacent_chunks_overlap(chunker: TextChunker) -> None:
    chunks = chunker.chunk([Fragment(text=_words(450))])
    for first, second in zip(chunks, chunks[1:]):
        shared = set(first.text.split()) & set(second.text.split())
        assert shared
        assert len(shared) <= 10
        assert second.text.split()[0] in first.text.split()


def test_short_fragment_yields_exactly_one_chunk(chunker: TextChunker) -> None:
    chunks = chunker.chunk([Fragment(text="Hi.")])
    assert [c.text for c in chunks] == ["Hi."]


def test_blank_fragments_are_dropped(chunker: TextChunker) -> None:
    chunks = chunker.chunk([Fragment(text="   \n\n  "), Fragment(text="")])
    assert chunks == []


def test_tiny_pieces_dropped_when_fragment_has_others() -> None:
    chunker = TextChunker(ChunkerConfig(chunk_size=14, chunk_overlap=0), token_counter=len)
    assert chunker.split_text("aaaaaaaaaaaa bb") == ["aaaaaaaaaaaa"]


def test_pieces_capped_at_max_chars() -> None:
    config = ChunkerConfig(chunk_size=100, chunk_overlap=0, max_chunk_chars=50)
    chunker = TextChunker(config, token_counter=word_count)
    pieces = chunker.split_text(_words(300))
    assert pieces
    assert all(len(p) <= 50 for p in pieces)


def test_order_is_stable_across_fragments(chunker: TextChunker) -> None:
    fragments = [Fragment(text=_words(250, "a")), Fragment(text=_words(250, "b"))]
    chunks = chunker.chunk(fragments)
    prefixes = [c.text[0] for c in chunks]
    assert prefixes == sorted(prefixes)
    first_a = [c for c in chunks if c.text.startswith("a")]
    assert first_a[0].text.startswith("a0 ")
    indexes = [c.metadata.extra["chunk_index"] for c in first_a]
    assert indexes == list(range(len(first_a)))


def test_chunks_inherit_fragment_metadata(chunker: TextChunker) -> None:
    fragment = Fragment(text="Short text.", source_metadata={"source": "test.md", "processor": "TextLoader"})
    [chunk] = chunker.chunk([fragment])
    assert chunk.id is None
    assert chunk.metadata.processor == "TextLoader"
    assert chunk.metadata.extra["source"] == "test.md"


def test_empty_input(chunker: TextChunker) -> None:
    assert chunker.chunk([]) == []


def test_overlap_must_be_smaller_than_size() -> None:
    with pytest.raises(ValueError, match="chunk_overlap"):
        TextChunker(ChunkerConfig(chunk_size=50, chunk_overlap=50), token_counter=word_count)


class TestTiktokenDefaults:
    @pytest.fixture()
    def default_chunker(self) -> TextChunker:
        """Skip when the tiktoken encoding can't be loaded (offline)."""
        try:
            return TextChunker()
        except Exception:
            pytest.skip("tiktoken encoding not available in this environment")

    def test_3000_char_fragment(self, default_chunker: TextChunker) -> None:
        sentence = "The quick brown fox jumps over the lazy dog. "
        text = (sentence * (3000 // len(sentence) + 1))[:3000]
        chunks = default_chunker.chunk([Fragment(text=text)])
        assert len(chunks) >= 1
        assert all(len(c.text) <= 10000 for c in chunks)
        for first, second in zip(chunks, chunks[1:]):
            assert set(first.text.split()) & set(second.text.split())

    def test_long_fragment_overlaps(self, default_chunker: TextChunker) -> None:
        chunks = default_chunker.chunk([Fragment(text=_words(3000))])
        assert len(chunks) > 1
        for first, second in zip(chunks, chunks[1:]):
            assert second.text.split()[0] in first.text.split()


def test_capped_windows_overlap_on_word_boundaries() -> None:
    config = ChunkerConfig(chunk_size=1000, chunk_overlap=10, max_chunk_chars=50)
    text = _words(300)
    pieces = TextChunker(config, token_counter=word_count).split_text(text)

    words = set(text.split())
    assert len(pieces) > 1
    assert all(len(p) <= 50 for p in pieces)
    assert all(set(p.split()) <= words for p in pieces)
    for first, second in zip(pieces, pieces[1:]):
        assert second.split()[0] in first.split()


def test_special_token_marker_is_plain_text(byte_level_encoding) -> None:
    chunker = TextChunker(ChunkerConfig(chunk_size=40, chunk_overlap=5))
    text = "Model docs mention the <|endoftext|> marker here. " * 3

    chunks = chunker.chunk([Fragment(text=text)])

    assert chunks
    assert any("<|endoftext|>" in c.text for c in chunks)
