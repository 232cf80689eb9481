"""
Graph data type definitions using Pydantic

Wire format for dependency graphs handed to the matcher (api_handlers,
graph_builder.build_semantic_graph). Validation covers shape and
referential integrity; the SemanticGraph built from it is what the matcher
reads.
"""

from typing import List, Optional, Set

from pydantic import BaseModel, Field, ConfigDict, model_validator


# ============================================================================
# Graph Structure
# ============================================================================

class NodeData(BaseModel):
    """A token in the dependency graph."""
    index: int = Field(..., ge=1, description="1-based token index; the node's identity")
    word: str = Field(..., description="Surface form")
    value: Optional[str] = Field(None, description="Node value; defaults to the word")
    lemma: Optional[str] = None
    tag: Optional[str] = Field(None, description="Part-of-speech tag")
    ner: Optional[str] = Field(None, description="Named-entity label")


class EdgeData(BaseModel):
    """Typed dependency from a governor to a dependent."""
    model_config = ConfigDict(populate_by_name=True)

    governor: int = Field(..., alias='from', ge=1, description="Governor node index")
    dependent: int = Field(..., alias='to', ge=1, description="Dependent node index")
    relation: str = Field(..., min_length=1, description="Relation label (e.g. nsubj, dobj)")


class GraphData(BaseModel):
    """Complete dependency graph."""
    nodes: List[NodeData] = Field(default_factory=list)
    edges: List[EdgeData] = Field(default_factory=list)
    roots: List[int] = Field(default_factory=list, description="Root node indices (optional)")

    @model_validator(mode='after')
    def check_references(self) -> 'GraphData':
        """Indices must be unique; edges and roots must reference known nodes."""
        seen: Set[int] = set()
        for node in self.nodes:
            if node.index in seen:
                raise ValueError(f"Duplicate node index: {node.index}")
            seen.add(node.index)

        for edge in self.edges:
            for ref in (edge.governor, edge.dependent):
                if ref not in seen:
                    raise ValueError(f"Edge references unknown node: {ref}")

        for root in self.roots:
            if root not in seen:
                raise ValueError(f"Root references unknown node: {root}")
        return self

    def get_node(self, index: int) -> Optional[NodeData]:
        for node in self.nodes:
            if node.index == index:
                return node
        return None
