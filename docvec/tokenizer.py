"""
Token counting adapters

The chunker measures chunk size in the embedding model's own tokens, so the
tokenizer is injected rather than hard-coded. Adapters are loaded once and
are read-only afterwards; count_tokens is safe to call from many threads.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from tokenizers import Tokenizer

from .exceptions import ModelLoadError

logger = logging.getLogger(__name__)


class TokenCounter(ABC):
    """Anything that can count tokens in a piece of text"""

    @abstractmethod
    def count_tokens(self, text: str) -> int:
        """Return the number of tokens in text; 0 for the empty string"""


class HuggingFaceTokenizer(TokenCounter):
    """
    Token counter backed by a HuggingFace `tokenizers` artifact

    Special tokens are not counted, and any truncation or padding stored in
    tokenizer.json is switched off so long inputs are never capped.
    """

    def __init__(self, tokenizer: Tokenizer, name: str = "tokenizer"):
        tokenizer.no_truncation()
        tokenizer.no_padding()
        self._tokenizer = tokenizer
        self.name = name

    @classmethod
    def from_file(cls, path: str) -> "HuggingFaceTokenizer":
        """Load from a local tokenizer.json"""
        tokenizer_path = Path(path)
        if tokenizer_path.is_dir():
            tokenizer_path = tokenizer_path / "tokenizer.json"

        if not tokenizer_path.is_file():
            raise ModelLoadError(f"Tokenizer file not found: {tokenizer_path}")

        try:
            tokenizer = Tokenizer.from_file(str(tokenizer_path))
        except Exception as e:
            logger.error(f"Failed to load tokenizer from {tokenizer_path}: {e}")
            raise ModelLoadError(f"Malformed tokenizer file {tokenizer_path}: {e}") from e

        logger.info(f"Loaded tokenizer from {tokenizer_path}")
        return cls(tokenizer, name=str(tokenizer_path))

    @classmethod
    def from_pretrained(cls, model_id: str) -> "HuggingFaceTokenizer":
        """Load the tokenizer published with a HuggingFace Hub model"""
        try:
            tokenizer = Tokenizer.from_pretrained(model_id)
        except Exception as e:
            logger.error(f"Failed to load tokenizer for {model_id}: {e}")
            raise ModelLoadError(f"Could not load tokenizer for {model_id}: {e}") from e

        logger.info(f"Loaded tokenizer for {model_id}")
        return cls(tokenizer, name=model_id)

    @classmethod
    def load(cls, path: Optional[str], model_id: str) -> "HuggingFaceTokenizer":
        """Prefer a local artifact, fall back to the model's Hub tokenizer"""
        if path:
            return cls.from_file(path)
        return cls.from_pretrained(model_id)

    def count_tokens(self, text: str) -> int:
        if not text:
            return 0
        return len(self._tokenizer.encode(text, add_special_tokens=False).ids)


class WhitespaceTokenizer(TokenCounter):
    """Deterministic offline counter: one token per whitespace-separated word"""

    def count_tokens(self, text: str) -> int:
        return len(text.split())
