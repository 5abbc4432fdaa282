"""Query normalization and tokenization."""

import re
import string
from typing import Iterable, List, Union

import structlog

logger = structlog.get_logger(__name__)


def ordered(tokens: Iterable[str]) -> List[str]:
    """List the tokens, sorting plain sets since they have no stable order."""
    if isinstance(tokens, (set, frozenset)):
        return sorted(tokens)
    return list(tokens)


def unique(tokens: Iterable[str]) -> List[str]:
    """Deduplicate tokens, keeping the order of first occurrence."""
    return list(dict.fromkeys(tokens))


class Tokenizer:
    """Turns raw query strings into normalized token lists."""

    def __init__(self) -> None:
        """Initialize the tokenizer."""
        # Apostrophes are removed outright so "don't" stays one word
        self.apostrophe_regex = re.compile(r"'")
        self.punctuation_regex = re.compile(f"[{re.escape(string.punctuation)}]")
        self.whitespace_regex = re.compile(r"\s+")

    def normalize(self, text: str) -> str:
        """
        Normalize a query string.

        Args:
            text: Raw query text

        Returns:
            Lowercased text with punctuation replaced by single spaces
        """
        if not text:
            return ""

        normalized = text.lower()
        normalized = self.apostrophe_regex.sub("", normalized)
        normalized = self.punctuation_regex.sub(" ", normalized)
        normalized = self.whitespace_regex.sub(" ", normalized)

        return normalized

    def tokenize(self, query: Union[str, Iterable[str]]) -> List[str]:
        """
        Split a query into unique tokens.

        Already tokenized input is passed through, only deduplicated.

        Args:
            query: Raw query string or a sequence of tokens

        Returns:
            List of unique tokens in order of first occurrence
        """
        if query is None:
            raise TypeError("Query must be a string or a sequence of strings, not None")

        if isinstance(query, str):
            tokens = [token for token in self.normalize(query).split(" ") if token]
        else:
            tokens = ordered(query)
            for token in tokens:
                if not isinstance(token, str):
                    raise TypeError(
                        f"Query tokens must be strings, got {type(token).__name__}"
                    )

        result = unique(tokens)
        logger.debug("query tokenized", tokens=len(result))
        return result


_default_tokenizer = Tokenizer()


def tokenize(query: Union[str, Iterable[str]]) -> List[str]:
    """Tokenize ``query`` with the default tokenizer."""
    return _default_tokenizer.tokenize(query)
