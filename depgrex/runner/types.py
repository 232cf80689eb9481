"""
Matcher API Types

Pydantic models for match requests/responses (see api_handlers.py).
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from ..graph_types import GraphData


# ============================================================================
# Request Types
# ============================================================================

class MatchRequest(BaseModel):
    """Request to run a pattern against one graph.

    The graph is given either as structured data (`graph`) or in bracket
    notation (`notation`), never both.
    """
    pattern: str = Field(..., min_length=1, description="Pattern text")
    graph: Optional[GraphData] = Field(default=None, description="Graph nodes/edges")
    notation: Optional[str] = Field(default=None, description="Bracket notation graph")
    bindings: Dict[str, int] = Field(
        default_factory=dict,
        description="Initial bindings: name -> node index"
    )
    taxonomy: Optional[Dict[str, List[str]]] = Field(
        default=None,
        description="Relation hierarchy (parent -> children); overrides settings"
    )
    settings: Dict[str, Any] = Field(default_factory=dict, description="MatcherSettings fields")
    limit: Optional[int] = Field(default=None, ge=1, description="Stop after this many matches")

    @model_validator(mode='after')
    def check_graph_source(self) -> 'MatchRequest':
        if (self.graph is None) == (self.notation is None):
            raise ValueError("Provide exactly one of 'graph' or 'notation'")
        return self


# ============================================================================
# Response Types
# ============================================================================

class NodeRef(BaseModel):
    """A graph node as reported back to callers."""
    index: Any = Field(description="Node key (token index)")
    word: str = Field(description="Surface form")


class MatchRecord(BaseModel):
    """One match: the root node plus named bindings."""
    root: NodeRef
    bindings: Dict[str, NodeRef] = Field(default_factory=dict)


class MatchResponse(BaseModel):
    """Response from a match request."""
    success: bool = Field(default=True)
    pattern: Optional[str] = Field(default=None, description="Canonical rendering of the pattern")
    matches: List[MatchRecord] = Field(default_factory=list)
    count: int = Field(default=0)
    truncated: bool = Field(default=False, description="True if `limit` cut the stream short")
    error: Optional[Dict[str, Any]] = Field(default=None, description="Error details if success=False")
