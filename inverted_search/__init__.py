"""
Inverted Search - in-memory keyword search over a token-to-document index.

This package builds and maintains inverted indexes from forward indexes
(document to tokens) and answers fuzzy, ranked keyword queries against
them, with stemming, synonym, supplement and drop-word query expansion.
"""

__version__ = "1.0.0"

from .core import (
    IndexManager,
    QueryExpander,
    SearchEngine,
    StringSimilarity,
    Tokenizer,
    add_supplements,
    add_synonyms,
    add_to_index,
    drop_words,
    generate_index,
    remove_from_index,
    root_words,
    search,
    select_search_tokens,
    similarity,
    tokenize,
)
from .log_config import configure_logging
from .models import QueryOptions, SearchResponse, SearchResult

__all__ = [
    "SearchEngine",
    "QueryExpander",
    "IndexManager",
    "StringSimilarity",
    "Tokenizer",
    "SearchResult",
    "SearchResponse",
    "QueryOptions",
    "configure_logging",
    "generate_index",
    "add_to_index",
    "remove_from_index",
    "tokenize",
    "root_words",
    "add_synonyms",
    "add_supplements",
    "drop_words",
    "similarity",
    "select_search_tokens",
    "search",
]
