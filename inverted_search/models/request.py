"""Query option models."""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field, validator

from ..config import get_settings


class QueryOptions(BaseModel):
    """Options controlling how a raw query is expanded and matched."""

    confidence: float = Field(
        default_factory=lambda: get_settings().default_confidence,
        allow_inf_nan=False,
        description="Fuzziness threshold: 100 = exact match only, lower = more permissive"
    )
    stem: bool = Field(
        default_factory=lambda: get_settings().enable_stemming,
        description="Whether to add heuristic word roots"
    )
    synonyms: Union[Dict[str, List[str]], List[List[str]]] = Field(
        default_factory=list, description="Synonym groups"
    )
    supplements: Dict[str, List[str]] = Field(
        default_factory=dict, description="Tokens added whenever a key token is present"
    )
    droplist: List[str] = Field(default_factory=list, description="Tokens never searched for")
    domain: List[Any] = Field(
        default_factory=list, description="Restrict results to these documents when non-empty"
    )

    @validator('domain')
    def validate_domain(cls, v: List[Any]) -> List[Any]:
        """Domain members must be usable as document ids."""
        for document_id in v:
            if document_id is None:
                raise ValueError("Domain cannot contain None")
            try:
                hash(document_id)
            except TypeError:
                raise ValueError(f"Domain member {document_id!r} is not hashable")
        return v
