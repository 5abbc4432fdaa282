"""Inverted index construction and maintenance."""

import time
from typing import Any, Dict, Hashable, Iterable, List, Mapping, Optional

import structlog

from .tokenizer import unique

logger = structlog.get_logger(__name__)

DocumentID = Hashable
ForwardIndex = Mapping[DocumentID, Iterable[str]]
InvertedIndex = Dict[str, List[DocumentID]]


def _document_tokens(document_id: DocumentID, tokens: Iterable[str]) -> List[str]:
    """Validate one forward index entry and return its unique tokens."""
    if document_id is None:
        raise ValueError("Forward index contains a None document id")
    if tokens is None:
        raise TypeError(f"Tokens for document {document_id!r} are None")
    if isinstance(tokens, (str, bytes)):
        raise TypeError(
            f"Tokens for document {document_id!r} must be a sequence of strings, "
            f"not a single {type(tokens).__name__}"
        )

    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(
                f"Token {token!r} for document {document_id!r} is not a string"
            )

    return unique(tokens)


def _check_forward(forward: ForwardIndex) -> None:
    if not isinstance(forward, Mapping):
        raise TypeError(
            f"Forward index must be a mapping, got {type(forward).__name__}"
        )


def _copy_index(index: InvertedIndex) -> InvertedIndex:
    if not isinstance(index, Mapping):
        raise TypeError(
            f"Inverted index must be a mapping, got {type(index).__name__}"
        )
    return {token: list(documents) for token, documents in index.items()}


def generate_index(forward: ForwardIndex) -> InvertedIndex:
    """
    Build an inverted index from a forward index.

    Args:
        forward: Mapping from document id to its tokens

    Returns:
        Mapping from token to the documents carrying it
    """
    return add_to_index({}, forward)


def add_to_index(index: InvertedIndex, forward: ForwardIndex) -> InvertedIndex:
    """
    Merge documents into an inverted index.

    The given index is left untouched; a document already listed under a
    token is not listed twice.

    Args:
        index: Existing inverted index
        forward: Documents to add, mapped to their tokens

    Returns:
        New inverted index containing the added documents
    """
    _check_forward(forward)
    result = _copy_index(index)

    for document_id, tokens in forward.items():
        for token in _document_tokens(document_id, tokens):
            documents = result.setdefault(token, [])
            if document_id not in documents:
                documents.append(document_id)

    logger.debug(
        "documents added to index",
        documents=len(forward),
        total_tokens=len(result),
    )
    return result


def remove_from_index(index: InvertedIndex, forward: ForwardIndex) -> InvertedIndex:
    """
    Remove documents from an inverted index.

    Tokens left without documents are deleted from the index.

    Args:
        index: Existing inverted index
        forward: Documents to remove, mapped to the tokens they were indexed under

    Returns:
        New inverted index without the removed documents
    """
    _check_forward(forward)
    result = _copy_index(index)

    for document_id, tokens in forward.items():
        for token in _document_tokens(document_id, tokens):
            if token not in result:
                continue

            remaining = [doc for doc in result[token] if doc != document_id]
            if remaining:
                result[token] = remaining
            else:
                del result[token]

    logger.debug(
        "documents removed from index",
        documents=len(forward),
        total_tokens=len(result),
    )
    return result


class IndexManager:
    """Keeps a forward index and its inverted index consistent."""

    def __init__(self) -> None:
        """Initialize the index manager."""
        self._forward: Dict[DocumentID, List[str]] = {}
        self._inverted: InvertedIndex = {}
        self._stats = {
            "total_documents": 0,
            "total_tokens": 0,
            "last_updated": None
        }

    @property
    def inverted_index(self) -> InvertedIndex:
        """Copy of the current inverted index."""
        return _copy_index(self._inverted)

    def add_documents(self, forward: ForwardIndex) -> None:
        """
        Add documents, replacing the tokens of any that are already indexed.

        Args:
            forward: Mapping from document id to its tokens
        """
        _check_forward(forward)
        incoming = {
            document_id: _document_tokens(document_id, tokens)
            for document_id, tokens in forward.items()
        }

        stale = {
            document_id: self._forward[document_id]
            for document_id in incoming
            if document_id in self._forward
        }
        inverted = remove_from_index(self._inverted, stale)
        self._inverted = add_to_index(inverted, incoming)
        self._forward.update(incoming)
        self._touch()

    def remove_documents(self, document_ids: Iterable[DocumentID]) -> int:
        """
        Remove documents from both indexes.

        Args:
            document_ids: Documents to remove; unknown ids are ignored

        Returns:
            Number of documents removed
        """
        removed = {
            document_id: self._forward[document_id]
            for document_id in unique(document_ids)
            if document_id in self._forward
        }
        if not removed:
            return 0

        self._inverted = remove_from_index(self._inverted, removed)
        for document_id in removed:
            del self._forward[document_id]
        self._touch()

        return len(removed)

    def update_document(self, document_id: DocumentID, tokens: Iterable[str]) -> None:
        """Replace the tokens of a single document."""
        self.add_documents({document_id: tokens})

    def get_tokens(self, document_id: DocumentID) -> Optional[List[str]]:
        """Tokens of a document, or None if it is not indexed."""
        if document_id in self._forward:
            return list(self._forward[document_id])
        return None

    def get_documents(self, token: str) -> Optional[List[DocumentID]]:
        """Documents carrying a token, or None if the token is not indexed."""
        if token in self._inverted:
            return list(self._inverted[token])
        return None

    def wordlist(self) -> List[str]:
        """All tokens currently in the inverted index."""
        return list(self._inverted.keys())

    def clear(self) -> None:
        """Clear both indexes."""
        self._forward.clear()
        self._inverted.clear()
        self._stats = {
            "total_documents": 0,
            "total_tokens": 0,
            "last_updated": None
        }

    def get_stats(self) -> Dict[str, Any]:
        """Get index statistics."""
        return self._stats.copy()

    def _touch(self) -> None:
        self._stats["total_documents"] = len(self._forward)
        self._stats["total_tokens"] = len(self._inverted)
        self._stats["last_updated"] = time.time()
