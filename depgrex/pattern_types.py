"""
Pattern AST types

Immutable node/relation descriptions produced by the pattern compiler
(see pattern_dsl.py) and shared read-only by every matcher built from them.

Structure:
    Pattern        ::= PatternNode (":" PatternNode)*        (partition)
    PatternNode    ::= NodeDescription (Relation | RelationGroup)*
    Relation       ::= op + filters + target PatternNode
    RelationGroup  ::= disjunction of relation sequences

Each Relation owns its target PatternNode; nothing points back up the tree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union, Iterator, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .runner.matcher import PatternMatcher


class AttributeKey(str, Enum):
    """Node attributes a pattern may test."""
    WORD = "word"
    VALUE = "value"
    LEMMA = "lemma"
    TAG = "tag"
    NER = "ner"


ATTRIBUTE_KEYS = frozenset(k.value for k in AttributeKey)


class RelationOp(str, Enum):
    """
    Relation operators.

    GOVERNED_BY / DEPENDENT_OF are the immediate relations; ANCESTOR /
    DESCENDANT walk any number of edges (bounded by an optional depth range).
    """
    GOVERNED_BY = "<"       # current node is a dependent of the target
    GOVERNS = ">"           # current node governs the target
    ANCESTOR = "<<"         # target is an ancestor of the current node
    DESCENDANT = ">>"       # target is a descendant of the current node

    @property
    def is_immediate(self) -> bool:
        return self in (RelationOp.GOVERNED_BY, RelationOp.GOVERNS)

    @property
    def walks_up(self) -> bool:
        """True when witnesses are found by following edges to governors."""
        return self in (RelationOp.GOVERNED_BY, RelationOp.ANCESTOR)


@dataclass(frozen=True)
class AttributeTest:
    """Literal or full-string regex test on one node attribute."""
    key: str
    value: str
    is_regex: bool = False
    compiled: Optional[re.Pattern] = field(default=None, compare=False, repr=False, hash=False)

    def __post_init__(self):
        if self.is_regex and self.compiled is None:
            object.__setattr__(self, 'compiled', re.compile(self.value))

    def test(self, actual: Optional[str]) -> bool:
        if actual is None:
            return False
        if self.is_regex:
            return self.compiled.fullmatch(actual) is not None
        return actual == self.value


@dataclass(frozen=True)
class NodeDescription:
    """
    Predicate over a graph node.

    `tests` are ANDed; `negated` complements the conjunction. `name`, when
    set, binds the matched node (and constrains later references to it).
    An empty description (`{}`) accepts any node.
    """
    tests: Tuple[AttributeTest, ...] = ()
    negated: bool = False
    name: Optional[str] = None


@dataclass(frozen=True)
class DepthRange:
    """Inclusive path-length bounds; max_depth=None means unbounded."""
    min_depth: int
    max_depth: Optional[int]

    def contains(self, depth: int) -> bool:
        if depth < max(self.min_depth, 1):
            return False
        return self.max_depth is None or depth <= self.max_depth


IMMEDIATE_RANGE = DepthRange(1, 1)
UNBOUNDED_RANGE = DepthRange(1, None)


@dataclass(frozen=True)
class Relation:
    """
    One relation clause attached to a PatternNode.

    depth is None when the pattern text gave no explicit bound; the operator
    default then applies (see effective_range).
    """
    op: RelationOp
    target: 'PatternNode'
    reln_type: Optional[str] = None
    negated: bool = False
    depth: Optional[DepthRange] = None

    @property
    def effective_range(self) -> DepthRange:
        if self.depth is not None:
            return self.depth
        return IMMEDIATE_RANGE if self.op.is_immediate else UNBOUNDED_RANGE


@dataclass(frozen=True)
class RelationGroup:
    """Disjunction: any one alternative sequence of relations must hold."""
    alternatives: Tuple[Tuple[Union[Relation, 'RelationGroup'], ...], ...]


RelationClause = Union[Relation, RelationGroup]


@dataclass(frozen=True)
class PatternNode:
    """A node description plus the relations (implicitly ANDed) hanging off it."""
    description: NodeDescription
    relations: Tuple[RelationClause, ...] = ()

    def iter_descriptions(self) -> Iterator[NodeDescription]:
        """All node descriptions in this subtree, depth-first, left to right."""
        yield self.description
        for clause in self.relations:
            for relation in _iter_relations(clause):
                yield from relation.target.iter_descriptions()


def _iter_relations(clause: RelationClause) -> Iterator[Relation]:
    if isinstance(clause, RelationGroup):
        for alternative in clause.alternatives:
            for inner in alternative:
                yield from _iter_relations(inner)
    else:
        yield clause


@dataclass(frozen=True)
class Pattern:
    """
    Compiled pattern: one or more partition clauses sharing a root candidate.

    Equality compares structure only; `source` keeps the text it was
    compiled from.
    """
    clauses: Tuple[PatternNode, ...]
    source: str = field(default="", compare=False)

    @property
    def root(self) -> PatternNode:
        return self.clauses[0]

    @property
    def node_names(self) -> List[str]:
        """Declared names in order of first appearance."""
        names: List[str] = []
        for clause in self.clauses:
            for desc in clause.iter_descriptions():
                if desc.name and desc.name not in names:
                    names.append(desc.name)
        return names

    def matcher(self, graph, initial_bindings=None, relation_matches=None, settings=None) -> 'PatternMatcher':
        """Build a match iterator over `graph` (see runner.matcher.PatternMatcher)."""
        from .runner.matcher import PatternMatcher
        return PatternMatcher(
            self,
            graph,
            initial_bindings=initial_bindings,
            relation_matches=relation_matches,
            settings=settings,
        )

    def render(self) -> str:
        """Canonical pattern text; compiling it yields an equal Pattern."""
        from .pattern_dsl import render_pattern
        return render_pattern(self)

    def __str__(self) -> str:
        return self.render()
