"""Query expansion: word roots, synonyms, supplements and dropped words."""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

import structlog

from .tokenizer import ordered, unique

logger = structlog.get_logger(__name__)

SynonymTable = Union[Mapping[str, Iterable[str]], Sequence[Iterable[str]]]
SupplementTable = Mapping[str, Iterable[str]]

# Words shorter than this are never reduced to a root
MIN_ROOT_LENGTH = 4


def _check_tokens(tokens: Iterable[str]) -> List[str]:
    if tokens is None or isinstance(tokens, str):
        raise TypeError("Tokens must be a sequence of strings")
    tokens = ordered(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"Tokens must be strings, got {type(token).__name__}")
    return tokens


def _word_roots(word: str) -> List[str]:
    """Heuristic root forms of a single word, most specific suffix first."""
    if len(word) < MIN_ROOT_LENGTH:
        return []

    if word.endswith("ies"):
        # cities -> city
        return [word[:-3] + "y"]
    if word.endswith("ves"):
        # wolves -> wolf, wives -> wife
        return [word[:-3] + "f", word[:-3] + "fe"]
    if word.endswith("oes"):
        # potatoes -> potato
        return [word[:-2]]
    if word.endswith("sses"):
        # gasses -> gas, passes -> pass
        return [word[:-3], word[:-2]]
    if word.endswith("es"):
        # braces -> brace, matches -> match
        return [word[:-1], word[:-2]]
    if word.endswith("s"):
        # cars -> car
        return [word[:-1]]
    if word.endswith("ing"):
        # playing -> play
        return [word[:-3]]
    if word.endswith("ed"):
        # played -> play, hated -> hate
        return [word[:-2], word[:-1]]
    if word.endswith("iful"):
        # beautiful -> beauty
        return [word[:-4] + "y"]
    if word.endswith("ful"):
        return [word[:-3] + "y"]

    return []


def root_words(tokens: Iterable[str]) -> List[str]:
    """
    Add heuristic root forms of each token.

    Args:
        tokens: Query tokens

    Returns:
        The original tokens followed by any new roots, deduplicated
    """
    tokens = _check_tokens(tokens)

    expanded = list(tokens)
    for word in tokens:
        expanded.extend(_word_roots(word))

    return unique(expanded)


def _synonym_groups(thesaurus: SynonymTable) -> List[List[str]]:
    if isinstance(thesaurus, Mapping):
        groups = thesaurus.values()
    elif isinstance(thesaurus, (str, bytes)) or thesaurus is None:
        raise TypeError("Thesaurus must be a mapping or a sequence of synonym groups")
    else:
        groups = thesaurus

    result = []
    for group in groups:
        result.append(_check_tokens(group))
    return result


def add_synonyms(tokens: Iterable[str], thesaurus: SynonymTable) -> List[str]:
    """
    Add the synonyms of each token.

    Only the first group containing a token is used, even if the token
    appears in several groups.

    Args:
        tokens: Query tokens
        thesaurus: Synonym groups, either keyed by a group id or as a sequence

    Returns:
        Tokens with synonyms added, deduplicated
    """
    tokens = _check_tokens(tokens)
    groups = _synonym_groups(thesaurus)

    expanded = list(tokens)
    for word in tokens:
        for group in groups:
            if word in group:
                expanded.extend(group)
                break

    return unique(expanded)


def add_supplements(tokens: Iterable[str], supplements: SupplementTable) -> List[str]:
    """
    Add the supplementary tokens registered for each token.

    Args:
        tokens: Query tokens
        supplements: Mapping from a token to the tokens it pulls in

    Returns:
        Tokens with supplements added, deduplicated
    """
    tokens = _check_tokens(tokens)
    if not isinstance(supplements, Mapping):
        raise TypeError("Supplements must be a mapping from token to tokens")

    expanded = list(tokens)
    for word in tokens:
        if word in supplements:
            expanded.extend(_check_tokens(supplements[word]))

    return unique(expanded)


def drop_words(tokens: Iterable[str], droplist: Iterable[str]) -> List[str]:
    """
    Remove every token found in the drop list.

    Args:
        tokens: Query tokens
        droplist: Tokens that must never be searched for

    Returns:
        Remaining tokens, deduplicated
    """
    tokens = _check_tokens(tokens)
    dropped = set(_check_tokens(droplist))

    return unique(token for token in tokens if token not in dropped)


class QueryExpander:
    """Applies the expansion stages with a fixed set of lookup tables."""

    def __init__(
        self,
        thesaurus: Optional[SynonymTable] = None,
        supplements: Optional[SupplementTable] = None,
        droplist: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Initialize the expander.

        Args:
            thesaurus: Synonym groups
            supplements: Supplementary tokens per token
            droplist: Tokens removed from every query
        """
        self.thesaurus = thesaurus if thesaurus is not None else []
        self.supplements: Dict[str, Iterable[str]] = (
            dict(supplements) if supplements is not None else {}
        )
        self.droplist = list(droplist) if droplist is not None else []

    def expand(
        self,
        tokens: Iterable[str],
        stem: bool = True,
        synonyms: bool = True,
        supplements: bool = True,
        drop: bool = True,
    ) -> List[str]:
        """
        Run the enabled stages in order: roots, synonyms, supplements, drops.

        Dropping always runs last so no expansion can bring back a
        dropped word.
        """
        expanded = _check_tokens(tokens)
        initial = len(expanded)

        if stem:
            expanded = root_words(expanded)
        if synonyms:
            expanded = add_synonyms(expanded, self.thesaurus)
        if supplements:
            expanded = add_supplements(expanded, self.supplements)
        if drop:
            expanded = drop_words(expanded, self.droplist)
        else:
            expanded = unique(expanded)

        logger.debug("query expanded", tokens_in=initial, tokens_out=len(expanded))
        return expanded
