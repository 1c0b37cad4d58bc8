"""
Tests for token-bounded chunking
"""

import pytest
from tokenizers import Tokenizer
from tokenizers.models import WordPiece
from tokenizers.normalizers import BertNormalizer
from tokenizers.pre_tokenizers import BertPreTokenizer

from docvec.chunker import Chunk, TextChunker
from docvec.tokenizer import HuggingFaceTokenizer, TokenCounter, WhitespaceTokenizer

VOCAB = [
    "[UNK]", "[CLS]", "[SEP]", "the", "quick", "brown", "fox", "wait", "what", "no",
    "really", "yes", "a", "日", "本", "語", "。", ".", ",", ":", "!", "?", '"',
] + [str(d) for d in range(10)] + [f"##{d}" for d in range(10)]


def wordpiece_tokenizer():
    """Small BERT-style tokenizer built in memory"""
    tokenizer = Tokenizer(WordPiece({token: i for i, token in enumerate(VOCAB)}, unk_token="[UNK]"))
    tokenizer.normalizer = BertNormalizer(lowercase=True)
    tokenizer.pre_tokenizer = BertPreTokenizer()
    return HuggingFaceTokenizer(tokenizer, name="wordpiece")


class CharCounter(TokenCounter):
    """One token per non-whitespace character"""

    def count_tokens(self, text):
        return len("".join(text.split()))


class ByteCounter(TokenCounter):
    """One token per UTF-8 byte of non-whitespace text"""

    def count_tokens(self, text):
        return len("".join(text.split()).encode("utf-8"))


def assert_lossless(text, chunks):
    """Chunks are ordered, non-overlapping slices separated only by whitespace"""
    position = 0
    for chunk in chunks:
        assert chunk.content
        assert text[chunk.start:chunk.end] == chunk.content
        assert chunk.content == chunk.content.strip()
        assert chunk.start >= position
        assert text[position:chunk.start].strip() == ""
        position = chunk.end
    assert text[position:].strip() == ""


class TestTextChunker:
    """Test cases for TextChunker"""

    def setup_method(self):
        self.chunker = TextChunker(WhitespaceTokenizer(), max_tokens=256)

    def test_short_text_is_one_chunk(self):
        """Text under the cap comes back whole, trimmed"""
        text = "  The quick brown fox jumps over the lazy dog.\n"
        assert self.chunker.split(text) == ["The quick brown fox jumps over the lazy dog."]

    def test_empty_text(self):
        """Empty and whitespace-only text produce no chunks"""
        assert self.chunker.split("") == []
        assert self.chunker.split("   \n\t  ") == []

    def test_thousand_tokens_make_four_chunks(self):
        """1000 evenly spread tokens with a cap of 256 give 4 chunks"""
        text = " ".join(f"w{i}" for i in range(1000))
        chunks = self.chunker.split(text, 256)

        assert len(chunks) == 4
        assert [len(c.split()) for c in chunks] == [256, 256, 256, 232]
        assert " ".join(chunks) == text

    def test_every_chunk_within_cap(self):
        """No chunk exceeds the cap when every word fits"""
        paragraph = "This sentence has exactly eight words in it. " * 12
        text = "\n\n".join([paragraph.strip()] * 5)

        for cap in (3, 7, 10, 50, 100):
            chunks = self.chunker.split_chunks(text, cap)
            assert chunks
            for chunk in chunks:
                assert self.chunker.counter.count_tokens(chunk.content) <= cap
            assert_lossless(text, chunks)

    def test_prefers_paragraph_boundaries(self):
        """Paragraphs that fit on their own are not merged past the cap"""
        text = "First paragraph has four.\n\nSecond paragraph has five words."
        assert self.chunker.split(text, 5) == [
            "First paragraph has four.",
            "Second paragraph has five words."
        ]

    def test_prefers_sentence_boundaries(self):
        """Sentences are merged greedily up to the cap"""
        text = "A b c. D e f. G h i."
        assert self.chunker.split(text, 6) == ["A b c. D e f.", "G h i."]

    def test_line_boundaries(self):
        """Lines are used before sentences and words"""
        text = "line one\nline two\nline three"
        assert self.chunker.split(text, 4) == ["line one\nline two", "line three"]

    def test_long_word_split_by_character(self):
        """A word larger than the cap is cut into character runs that fit"""
        chunker = TextChunker(CharCounter(), max_tokens=10)
        text = "short " + "x" * 50 + " tail"

        assert chunker.split(text) == ["short"] + ["x" * 10] * 5 + ["tail"]

    def test_text_that_is_one_long_word(self):
        chunker = TextChunker(CharCounter(), max_tokens=3)
        assert chunker.split("  supercalifragilistic  ") == ["sup", "erc", "ali", "fra", "gil", "ist", "ic"]

    def test_oversized_character_is_kept(self):
        """A single character over the cap becomes its own chunk"""
        chunker = TextChunker(ByteCounter(), max_tokens=1)
        chunks = chunker.split_chunks("aé")

        assert [c.content for c in chunks] == ["a", "é"]
        assert [(c.start, c.end) for c in chunks] == [(0, 1), (1, 2)]

    def test_chunk_offsets_and_weights(self):
        """Chunks carry source offsets, indexes and character-length weights"""
        text = "Alpha beta gamma.\n\nDelta epsilon zeta eta."
        chunks = self.chunker.split_chunks(text, 3)

        assert [c.index for c in chunks] == list(range(len(chunks)))
        for chunk in chunks:
            assert chunk.weight == float(len(chunk.content))
        assert_lossless(text, chunks)

    def test_uses_default_cap(self):
        """The constructor cap applies when none is passed"""
        chunker = TextChunker(WhitespaceTokenizer(), max_tokens=2)
        assert chunker.split("one two three four") == ["one two", "three four"]

    def test_invalid_cap(self):
        """Non-positive caps are rejected"""
        with pytest.raises(ValueError):
            TextChunker(WhitespaceTokenizer(), max_tokens=0)
        with pytest.raises(ValueError):
            self.chunker.split("some text", -1)

    def test_unicode_text(self):
        """Non-ASCII text round-trips through chunking"""
        text = "Café déjà vu. Ünïcödé wörds hère. 日本語 テキスト です。"
        chunks = self.chunker.split_chunks(text, 3)
        assert_lossless(text, chunks)


class TestTextChunkerWordPiece:
    """Chunking measured with a subword tokenizer"""

    def setup_method(self):
        self.tokenizer = wordpiece_tokenizer()
        self.chunker = TextChunker(self.tokenizer, max_tokens=20)

    def assert_within_cap(self, chunks, cap):
        for chunk in chunks:
            assert self.tokenizer.count_tokens(chunk.content) <= cap or len(chunk.content) == 1

    def test_cjk_without_spaces(self):
        """CJK text with no whitespace or punctuation is cut between characters"""
        text = "日本語" * 100
        assert self.tokenizer.count_tokens(text) == 300

        chunks = self.chunker.split_chunks(text)

        assert len(chunks) == 15
        assert all(self.tokenizer.count_tokens(c.content) == 20 for c in chunks)
        assert "".join(c.content for c in chunks) == text
        assert_lossless(text, chunks)

    def test_cjk_sentences(self):
        """Full-width sentence marks are sentence boundaries"""
        text = "日本語のテキストです。" * 50
        assert self.tokenizer.count_tokens(text) == 250

        chunks = self.chunker.split_chunks(text)

        assert len(chunks) == 13
        assert all(c.content.endswith("。") for c in chunks)
        self.assert_within_cap(chunks, 20)
        assert_lossless(text, chunks)

    def test_minified_json(self):
        """Punctuation-only separators still produce chunks within the cap"""
        text = ",".join(f'"a{i}":{i}' for i in range(200))
        assert self.tokenizer.count_tokens(text) > 1000

        chunks = self.chunker.split_chunks(text)

        assert len(chunks) > 50
        self.assert_within_cap(chunks, 20)
        assert "".join(c.content for c in chunks) == text

    def test_punctuation_dense_text(self):
        """Every chunk fits the cap, whatever the cap"""
        text = "Wait... what?! No!!! Really?? Yes. The quick brown fox.\n" * 30

        for cap in (1, 3, 8, 25, 100):
            chunks = self.chunker.split_chunks(text, cap)
            assert chunks
            self.assert_within_cap(chunks, cap)
            assert_lossless(text, chunks)

    def test_mixed_text_under_cap(self):
        text = "The quick brown fox. 日本語。"
        assert self.chunker.split(text) == [text]


class TestChunk:
    """Test cases for the Chunk model"""

    def test_weight_defaults_to_length(self):
        assert Chunk(content="hello").weight == 5.0

    def test_explicit_weight(self):
        assert Chunk(content="", weight=1.0).weight == 1.0
