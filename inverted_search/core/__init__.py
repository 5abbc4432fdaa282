"""Core indexing and search functionality."""

from .engine import SearchEngine, search, select_search_tokens
from .expander import QueryExpander, add_supplements, add_synonyms, drop_words, root_words
from .index import IndexManager, add_to_index, generate_index, remove_from_index
from .similarity import StringSimilarity, similarity
from .tokenizer import Tokenizer, tokenize

__all__ = [
    "SearchEngine",
    "QueryExpander",
    "IndexManager",
    "StringSimilarity",
    "Tokenizer",
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
