"""Unit tests for the search engine core functionality."""

import math

import pytest
from pydantic import ValidationError

from inverted_search.core.engine import SearchEngine, search, select_search_tokens
from inverted_search.core.index import generate_index
from inverted_search.core.similarity import similarity
from inverted_search.models import QueryOptions, SearchResponse


@pytest.fixture
def index():
    """Small inverted index for testing."""
    return {"red": [1, 2], "car": [1, 3]}


class TestSelectSearchTokens:
    """Test cases for search token selection."""

    @pytest.fixture
    def engine(self):
        """Create a search engine instance for testing."""
        return SearchEngine()

    def test_exact_mode(self, engine):
        """Test that full confidence keeps the query tokens."""
        assert engine.select_search_tokens(["kat", "dog"], ["cat", "dog"]) == ["kat", "dog"]
        assert engine.select_search_tokens(["kat"], ["cat"], 100) == ["kat"]

    def test_confidence_above_maximum(self, engine):
        """Test that confidence over 100 is still exact."""
        assert engine.select_search_tokens(["kat"], ["cat"], 250) == ["kat"]

    def test_fuzzy_mode(self, engine):
        """Test similar wordlist tokens are selected."""
        assert engine.select_search_tokens(["kat"], ["cat", "dog"], 50) == ["cat"]

    def test_fuzzy_threshold_inclusive(self, engine):
        """Test tokens exactly at the threshold are selected."""
        threshold = similarity("cat", "car")
        assert engine.select_search_tokens(["cat"], ["cat", "car"], threshold) == ["cat", "car"]

    def test_fuzzy_matches_any_query_token(self, engine):
        """Test that one similar query token is enough."""
        wordlist = ["cat", "dog", "cow"]
        assert engine.select_search_tokens(["cat", "dog"], wordlist, 60) == ["cat", "dog"]

    def test_fuzzy_is_deterministic(self, engine):
        """Test that repeated selections agree."""
        wordlist = ["cat", "cart", "scatter", "dog", "kit"]
        first = engine.select_search_tokens(["kat"], wordlist, 40)
        assert first == engine.select_search_tokens(["kat"], wordlist, 40)
        assert "cat" in first

    def test_set_inputs_are_ordered(self, engine):
        """Test that token sets give the same selection order every run."""
        assert engine.select_search_tokens({"kat", "dog"}, {"dog", "cat", "cow"}, 60) == [
            "cat", "dog"
        ]
        assert engine.select_search_tokens({"b", "a"}, []) == ["a", "b"]

    def test_negative_confidence_clamped(self, engine):
        """Test that negative confidence behaves like zero."""
        assert engine.select_search_tokens(["kat"], ["cat", "dog"], -5) == ["cat", "dog"]

    def test_fuzzy_no_match(self, engine):
        """Test a fuzzy selection that finds nothing."""
        assert engine.select_search_tokens(["xyz"], ["cat", "dog"], 50) == []

    def test_invalid_confidence(self, engine):
        """Test that non-finite confidence fails fast."""
        with pytest.raises(ValueError):
            engine.select_search_tokens(["kat"], ["cat"], math.nan)
        with pytest.raises(ValueError):
            engine.select_search_tokens(["kat"], ["cat"], math.inf)
        with pytest.raises(TypeError):
            engine.select_search_tokens(["kat"], ["cat"], "50")

    def test_module_level_function(self):
        """Test the module-level convenience function."""
        assert select_search_tokens(["kat"], ["cat", "dog"], confidence=50) == ["cat"]


class TestSearch:
    """Test cases for scoring and ranking."""

    @pytest.fixture
    def engine(self):
        """Create a search engine instance for testing."""
        return SearchEngine()

    def test_empty_tokens_search_everything(self, engine, index):
        """Test that no search tokens means every index token."""
        results = engine.search(index, [])

        assert list(results) == [1, 2, 3]
        assert results[1].score == 100.0
        assert results[1].matches == ["red", "car"]
        assert results[2].score == 50.0
        assert results[3].score == 50.0

    def test_domain_keeps_denominator(self, engine, index):
        """Test that the domain filters documents but not the score base."""
        results = engine.search(index, [], domain={1})
        assert list(results) == [1]
        assert results[1].score == 100.0

        results = engine.search(index, [], domain=[2])
        assert list(results) == [2]
        assert results[2].score == 50.0

    def test_unknown_tokens_count_in_denominator(self, engine, index):
        """Test that tokens missing from the index still count."""
        results = engine.search(index, ["red", "car", "blue"])

        assert results[1].score == 66.67
        assert results[2].score == 33.33
        assert results[3].score == 33.33

    def test_ranking_and_ties(self, engine):
        """Test descending scores with ties in aggregation order."""
        index = {"a": [5, 4], "b": [4, 6], "c": [6]}
        results = engine.search(index, ["a", "b", "c"])

        assert list(results) == [4, 6, 5]
        assert results[4].matches == ["a", "b"]
        assert results[6].matches == ["b", "c"]

    def test_duplicate_search_tokens(self, engine, index):
        """Test that repeated search tokens count once."""
        results = engine.search(index, ["red", "red"])
        assert results[1].score == 100.0
        assert results[1].matches == ["red"]

    def test_no_results(self, engine, index):
        """Test tokens that match nothing."""
        assert engine.search(index, ["purple"]) == {}
        assert engine.search({}, []) == {}

    def test_empty_domain_iterator(self, engine, index):
        """Test that an exhausted domain iterator applies no restriction."""
        results = engine.search(index, [], domain=iter([]))

        assert list(results) == [1, 2, 3]
        assert results[1].score == 100.0

    def test_set_tokens_rank_deterministically(self, engine):
        """Test that token sets are searched in sorted order."""
        index = {"red": [1, 2], "car": [1, 3], "blue": [4]}
        results = engine.search(index, {"red", "car", "blue"})

        assert list(results) == [1, 4, 3, 2]
        assert results[1].matches == ["car", "red"]
        assert results[1].score == 66.67

    def test_domain_excludes_everything(self, engine, index):
        """Test a domain with no matching documents."""
        assert engine.search(index, ["red"], domain=[99]) == {}

    def test_rounding_half_up(self, engine):
        """Test two-decimal rounding."""
        index = {"t0": ["d"]}
        tokens = ["t0"] + [f"t{i}" for i in range(1, 8)]
        # 1 / 8 = 12.5
        assert engine.search(index, tokens)["d"].score == 12.5

        tokens = ["t0"] + [f"t{i}" for i in range(1, 6)]
        # 1 / 6 = 16.666...
        assert engine.search(index, tokens)["d"].score == 16.67

    def test_invalid_input(self, engine, index):
        """Test that contract violations fail fast."""
        with pytest.raises(TypeError):
            engine.search([("red", [1])], [])
        with pytest.raises(TypeError):
            engine.search(index, "red")

    def test_module_level_function(self, index):
        """Test the module-level convenience function."""
        results = search(index, ["car"])
        assert list(results) == [1, 3]


class TestQuery:
    """Test cases for the end-to-end query pipeline."""

    @pytest.fixture
    def engine(self):
        """Create a search engine instance for testing."""
        return SearchEngine(max_query_length=50)

    @pytest.fixture
    def documents(self):
        """Inverted index built from sample documents."""
        return generate_index({
            "a": ["red", "car"],
            "b": ["red", "bicycle"],
            "c": ["blue", "car"],
        })

    def test_exact_query(self, engine, documents):
        """Test tokenizing, stemming and exact search."""
        response = engine.query("Red cars!", documents, QueryOptions(confidence=100))

        assert isinstance(response, SearchResponse)
        assert response.search_tokens == ["red", "cars", "car"]
        assert [result.document_id for result in response.results] == ["a", "b", "c"]
        assert response.results[0].score == 66.67
        assert response.results[0].matches == ["red", "car"]
        assert response.total_results == 3

    def test_fuzzy_query(self, engine, documents):
        """Test fuzzy selection against the index tokens."""
        response = engine.query("kar", documents, QueryOptions(confidence=60, stem=False))

        assert response.search_tokens == ["car"]
        assert [result.document_id for result in response.results] == ["a", "c"]
        assert all(result.score == 100.0 for result in response.results)

    def test_query_with_tables(self, engine, documents):
        """Test synonyms, supplements, drops and domain together."""
        options = QueryOptions(
            confidence=100,
            stem=False,
            synonyms=[["auto", "car"]],
            supplements={"auto": ["red"]},
            droplist=["the"],
            domain=["c"],
        )
        response = engine.query("the auto", documents, options)

        assert response.search_tokens == ["auto", "car", "red"]
        assert len(response.results) == 1
        assert response.results[0].document_id == "c"
        assert response.results[0].score == 33.33

    def test_fully_dropped_query(self, engine, documents):
        """Test that a query with nothing left matches nothing."""
        response = engine.query("red", documents, QueryOptions(droplist=["red"]))

        assert response.search_tokens == []
        assert response.results == []

    def test_fuzzy_query_without_candidates(self, engine, documents):
        """Test a fuzzy query that selects no index tokens."""
        response = engine.query("zzz", documents, QueryOptions(confidence=90))

        assert response.results == []

    def test_token_list_query(self, engine, documents):
        """Test passing already tokenized input."""
        response = engine.query(["blue"], documents, QueryOptions(confidence=100))
        assert [result.document_id for result in response.results] == ["c"]

    def test_query_too_long(self, engine, documents):
        """Test the raw query length limit."""
        with pytest.raises(ValueError):
            engine.query("red " * 20, documents)

    def test_invalid_options(self):
        """Test that invalid options are rejected."""
        with pytest.raises(ValidationError):
            QueryOptions(confidence=math.nan)
        with pytest.raises(ValidationError):
            QueryOptions(domain=[None])

    def test_stats(self, engine, documents):
        """Test query statistics tracking."""
        engine.query("red", documents, QueryOptions(confidence=100))
        engine.query("kar", documents, QueryOptions(confidence=60))
        engine.query("purple", documents, QueryOptions(confidence=100))

        stats = engine.get_stats()
        assert stats["total_queries"] == 3
        assert stats["fuzzy_queries"] == 1
        assert stats["queries_with_results"] == 2
        assert stats["no_matches"] == 1
        assert stats["no_match_rate"] == 1 / 3
        assert stats["average_execution_time_ms"] >= 0

        engine.reset_stats()
        assert engine.get_stats()["total_queries"] == 0
