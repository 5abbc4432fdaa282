"""Token selection, scoring and ranking over an inverted index."""

import math
import numbers
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional, Union

import structlog
from rapidfuzz import fuzz

from ..config import Settings
from ..models.request import QueryOptions
from ..models.response import SearchResult, SearchResponse
from .expander import QueryExpander
from .index import InvertedIndex
from .similarity import StringSimilarity
from .tokenizer import Tokenizer, ordered, unique

logger = structlog.get_logger(__name__)

EXACT_CONFIDENCE = 100.0

# Float slack when comparing the Indel ratio bound against the confidence
_BOUND_TOLERANCE = 1e-9


def _round_score(value: float) -> float:
    """Round half away from zero to two decimals."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _check_confidence(confidence: Any) -> float:
    if isinstance(confidence, bool) or not isinstance(confidence, numbers.Real):
        raise TypeError(f"Confidence must be a number, got {type(confidence).__name__}")
    confidence = float(confidence)
    if not math.isfinite(confidence):
        raise ValueError(f"Confidence must be finite, got {confidence}")
    return max(confidence, 0.0)


class SearchEngine:
    """Selects index tokens for a query and ranks the matching documents."""

    def __init__(
        self,
        default_confidence: float = EXACT_CONFIDENCE,
        max_query_length: int = 1000
    ) -> None:
        """
        Initialize the search engine.

        Args:
            default_confidence: Confidence used when a query does not set one
            max_query_length: Longest raw query string accepted by ``query``
        """
        self.default_confidence = _check_confidence(default_confidence)
        self.max_query_length = max_query_length
        self.similarity = StringSimilarity()
        self.tokenizer = Tokenizer()

        self._stats = self._empty_stats()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SearchEngine":
        """Create an engine configured from ``settings``."""
        return cls(
            default_confidence=settings.default_confidence,
            max_query_length=settings.max_query_length
        )

    def select_search_tokens(
        self,
        query_tokens: Iterable[str],
        wordlist: Iterable[str],
        confidence: float = EXACT_CONFIDENCE
    ) -> List[str]:
        """
        Choose the index tokens to search for.

        At full confidence the query tokens are used as they are. Below it,
        every wordlist token at least ``confidence`` percent similar to any
        query token is selected.

        Args:
            query_tokens: Expanded query tokens
            wordlist: Tokens present in the inverted index
            confidence: Fuzziness threshold, clamped to be at least 0

        Returns:
            Unique tokens to search for
        """
        confidence = _check_confidence(confidence)
        query_tokens = unique(ordered(query_tokens))

        if confidence >= EXACT_CONFIDENCE:
            return query_tokens

        selected = []
        for word in unique(ordered(wordlist)):
            for query_word in query_tokens:
                # Indel ratio never undercuts the substring similarity
                bound = fuzz.ratio(query_word, word)
                if bound + _BOUND_TOLERANCE < confidence:
                    continue
                if self.similarity.matches(query_word, word, confidence):
                    selected.append(word)
                    break

        logger.debug(
            "fuzzy tokens selected",
            confidence=confidence,
            query_tokens=len(query_tokens),
            selected=len(selected)
        )
        return selected

    def search(
        self,
        index: InvertedIndex,
        search_tokens: Optional[Iterable[str]] = None,
        domain: Optional[Iterable[Hashable]] = None
    ) -> Dict[Hashable, SearchResult]:
        """
        Score the documents matching the search tokens.

        An empty token list searches for every token in the index. The
        score is the share of search tokens a document matched, so
        documents filtered out by ``domain`` do not change anyone else's
        score.

        Args:
            index: Inverted index to search
            search_tokens: Tokens to look up
            domain: Only return these documents when non-empty

        Returns:
            Results keyed by document id, highest score first
        """
        if not isinstance(index, Mapping):
            raise TypeError(f"Inverted index must be a mapping, got {type(index).__name__}")
        if isinstance(search_tokens, str):
            raise TypeError("Search tokens must be a sequence of strings, not a single string")

        search_tokens = unique(ordered(search_tokens or []))
        if not search_tokens:
            search_tokens = list(index.keys())

        allowed = set(domain) if domain is not None else set()
        if not allowed:
            allowed = None

        # Insertion order of this dict is the tie-break order
        matches: Dict[Hashable, List[str]] = {}
        for token in search_tokens:
            for document_id in index.get(token, ()):
                if allowed is not None and document_id not in allowed:
                    continue
                document_matches = matches.setdefault(document_id, [])
                if token not in document_matches:
                    document_matches.append(token)

        total = len(search_tokens)
        scored = [
            SearchResult(
                document_id=document_id,
                score=_round_score(len(tokens) / total * 100),
                matches=tokens
            )
            for document_id, tokens in matches.items()
        ]
        scored.sort(key=lambda result: result.score, reverse=True)

        logger.debug(
            "search completed",
            search_tokens=total,
            results=len(scored),
            domain_size=len(allowed) if allowed is not None else 0
        )
        return {result.document_id: result for result in scored}

    def query(
        self,
        query: Union[str, Iterable[str]],
        index: InvertedIndex,
        options: Optional[QueryOptions] = None
    ) -> SearchResponse:
        """
        Run a raw query through tokenizing, expansion, token selection and search.

        Args:
            query: Raw query string or token list
            index: Inverted index to search
            options: Expansion tables, confidence and domain

        Returns:
            SearchResponse with ranked results
        """
        start_time = time.time()
        if options is None:
            options = QueryOptions(confidence=self.default_confidence)

        if isinstance(query, str) and len(query) > self.max_query_length:
            raise ValueError(
                f"Query too long. Maximum length is {self.max_query_length} characters"
            )
        if query is not None and not isinstance(query, str):
            query = list(query)

        tokens = self.tokenizer.tokenize(query)
        expander = QueryExpander(options.synonyms, options.supplements, options.droplist)
        expanded = expander.expand(tokens, stem=options.stem)

        confidence = _check_confidence(options.confidence)
        if not expanded:
            # Nothing left to look for; an empty token list would match everything
            search_tokens: List[str] = []
            results: List[SearchResult] = []
        else:
            search_tokens = self.select_search_tokens(expanded, index.keys(), confidence)
            # A fuzzy query that selects nothing matches nothing
            if search_tokens:
                results = list(self.search(index, search_tokens, options.domain).values())
            else:
                results = []

        execution_time = (time.time() - start_time) * 1000
        self._record(results, confidence, execution_time)

        logger.info(
            "query executed",
            tokens=len(tokens),
            expanded_tokens=len(expanded),
            search_tokens=len(search_tokens),
            results=len(results),
            execution_time_ms=round(execution_time, 3)
        )

        return SearchResponse(
            query=query,
            search_tokens=search_tokens,
            confidence=confidence,
            total_results=len(results),
            results=results,
            execution_time_ms=execution_time
        )

    def _record(self, results: List[SearchResult], confidence: float, execution_time: float) -> None:
        self._stats["total_queries"] += 1
        if confidence < EXACT_CONFIDENCE:
            self._stats["fuzzy_queries"] += 1
        if results:
            self._stats["queries_with_results"] += 1
        else:
            self._stats["no_matches"] += 1
        self._stats["total_execution_time"] += execution_time

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "total_queries": 0,
            "fuzzy_queries": 0,
            "queries_with_results": 0,
            "no_matches": 0,
            "total_execution_time": 0.0
        }

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        stats = self._stats.copy()

        if stats["total_queries"] > 0:
            stats["average_execution_time_ms"] = (
                stats["total_execution_time"] / stats["total_queries"]
            )
            stats["no_match_rate"] = stats["no_matches"] / stats["total_queries"]
        else:
            stats["average_execution_time_ms"] = 0.0
            stats["no_match_rate"] = 0.0

        return stats

    def reset_stats(self) -> None:
        """Reset query statistics."""
        self._stats = self._empty_stats()


_default_engine = SearchEngine()


def select_search_tokens(
    query_tokens: Iterable[str],
    wordlist: Iterable[str],
    confidence: float = EXACT_CONFIDENCE
) -> List[str]:
    """Select search tokens with a default engine."""
    return _default_engine.select_search_tokens(query_tokens, wordlist, confidence)


def search(
    index: InvertedIndex,
    search_tokens: Optional[Iterable[str]] = None,
    domain: Optional[Iterable[Hashable]] = None
) -> Dict[Hashable, SearchResult]:
    """Search an inverted index with a default engine."""
    return _default_engine.search(index, search_tokens, domain)
