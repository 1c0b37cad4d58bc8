"""
Token-bounded text chunking

Text is cut at the coarsest natural boundary that keeps each chunk within the
token cap: paragraphs first, then lines, sentences, words and finally single
characters. Splitting and greedy merging are done by LangChain's
RecursiveCharacterTextSplitter, measured with the embedding model's tokenizer.
Only a single character that is larger than the cap on its own is emitted as
an over-cap chunk.

Every chunk is a contiguous slice of the input with surrounding whitespace
trimmed, so the gaps between consecutive chunks contain only whitespace.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from langchain_text_splitters import RecursiveCharacterTextSplitter

from .tokenizer import TokenCounter

logger = logging.getLogger(__name__)

# Coarsest first; separators stay at the start of the following piece
SEPARATORS = [
    r"\n[^\S\n]*\n",                                       # paragraph
    r"\n",                                                 # line
    r"(?<=[.!?])\s+|(?<=[.!?][\"')\]])\s+|(?<=[。！？])",  # sentence
    r"\s+",                                                # word
    "",                                                    # character
]


@dataclass
class Chunk:
    """A fragment of the source text, weighted by its character length"""
    content: str
    start: int = 0
    end: int = 0
    index: int = 0
    weight: Optional[float] = None

    def __post_init__(self):
        if self.weight is None:
            self.weight = float(len(self.content))


class TextChunker:
    """
    Splits text into chunks of at most `max_tokens` tokens

    Args:
        counter: Token counter for the embedding model's tokenizer
        max_tokens: Default token cap per chunk
    """

    def __init__(self, counter: TokenCounter, max_tokens: int = 256):
        _check_max_tokens(max_tokens)
        self.counter = counter
        self.max_tokens = max_tokens

    def split(self, text: str, max_tokens: Optional[int] = None) -> List[str]:
        """Split text into an ordered list of chunk strings"""
        return [chunk.content for chunk in self.split_chunks(text, max_tokens)]

    def split_chunks(self, text: str, max_tokens: Optional[int] = None) -> List[Chunk]:
        """
        Split text into chunks carrying their offsets and weights

        Args:
            text: Source text
            max_tokens: Token cap, defaults to the chunker's cap

        Returns:
            Chunks in source order; empty for empty or whitespace-only text
        """
        max_tokens = self.max_tokens if max_tokens is None else max_tokens
        _check_max_tokens(max_tokens)

        if not text or text.isspace():
            return []

        stripped = text.strip()
        if self.counter.count_tokens(stripped) <= max_tokens:
            start = text.index(stripped)
            return [Chunk(content=stripped, start=start, end=start + len(stripped))]

        documents = self._splitter(max_tokens).create_documents([text])

        chunks = []
        for doc in documents:
            start = doc.metadata["start_index"]
            chunks.append(Chunk(
                content=doc.page_content,
                start=start,
                end=start + len(doc.page_content),
                index=len(chunks)
            ))

        logger.debug(f"Split {len(text)} characters into {len(chunks)} chunks (max_tokens={max_tokens})")
        return chunks

    def _splitter(self, max_tokens: int) -> RecursiveCharacterTextSplitter:
        return RecursiveCharacterTextSplitter(
            separators=SEPARATORS,
            is_separator_regex=True,
            keep_separator=True,
            chunk_size=max_tokens,
            chunk_overlap=0,
            length_function=self.counter.count_tokens,
            add_start_index=True,
            strip_whitespace=True
        )


def _check_max_tokens(max_tokens: int):
    if not isinstance(max_tokens, int) or isinstance(max_tokens, bool) or max_tokens <= 0:
        raise ValueError(f"max_tokens must be a positive integer, got {max_tokens!r}")
