"""
Match iterator

PatternMatcher is the pull-based query surface over search.py: each call to
find() advances to the next match; accessors then describe that match.

    matcher = compile_pattern("{} >dobj ({} >expl {}=foo)").matcher(graph)
    while matcher.find():
        root = matcher.get_match()
        foo = matcher.get_node("foo")

Matchers are single-owner. Several matchers may share one Pattern and one
graph across threads as long as nobody mutates the graph meanwhile.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Set

from ..graph_builder import SemanticGraph, as_semantic_graph
from ..pattern_types import Pattern
from ..relations import taxonomy_for_settings
from ..settings import MatcherSettings
from .search import RelationMatches, search
from .types import MatchRecord, NodeRef


logger = logging.getLogger(__name__)


class NoMatchError(LookupError):
    """Raised when match accessors are used without a current match."""
    pass


class UnboundNameError(KeyError):
    """Raised when asking for a name the current match did not bind."""
    pass


@dataclass(frozen=True)
class Match:
    """The root node of a match and its name -> node bindings."""
    root: Any
    bindings: Dict[str, Any] = field(default_factory=dict)

    def to_record(self, graph: SemanticGraph) -> MatchRecord:
        return MatchRecord(
            root=NodeRef(index=self.root, word=graph.word(self.root)),
            bindings={
                name: NodeRef(index=node, word=graph.word(node))
                for name, node in self.bindings.items()
            },
        )


class PatternMatcher:
    """
    Cursor over the matches of one pattern in one graph.

    Args:
        pattern: Compiled Pattern
        graph: SemanticGraph or anything as_semantic_graph() accepts
        initial_bindings: name -> node; fixed for the whole search and
            reported among the bound names
        relation_matches: Relation-type predicate; defaults to the taxonomy
            named in settings (exact label matching if none)
        settings: MatcherSettings
    """

    def __init__(
        self,
        pattern: Pattern,
        graph,
        initial_bindings: Optional[Dict[str, Any]] = None,
        relation_matches: Optional[RelationMatches] = None,
        settings: Optional[MatcherSettings] = None,
    ):
        self.pattern = pattern
        self.settings = settings or MatcherSettings()
        self.graph = as_semantic_graph(graph, self.settings)
        self.initial_bindings = dict(initial_bindings or {})
        self.relation_matches = relation_matches if relation_matches is not None else taxonomy_for_settings(self.settings)
        self.reset()

    def reset(self) -> None:
        """Restart enumeration from the first candidate root."""
        self._results = search(self.pattern, self.graph, self.initial_bindings, self.relation_matches)
        self._current: Optional[Match] = None
        self._exhausted = False
        self._count = 0

    # ── advancing ─────────────────────────────────────────────

    def find(self) -> bool:
        """Advance to the next match. Returns False (repeatedly) once exhausted."""
        if self._exhausted:
            return False
        try:
            root, env = next(self._results)
        except StopIteration:
            self._exhausted = True
            self._current = None
            logger.debug("Pattern %s exhausted after %d match(es)", self.pattern, self._count)
            return False
        self._current = Match(root=root, bindings=env)
        self._count += 1
        return True

    def find_next_matching_node(self) -> bool:
        """
        Advance to the first match whose root differs from the current one.

        Shares the cursor with find(): the remaining matches at the current
        root are consumed and skipped.
        """
        previous = self._current
        while self.find():
            if previous is None or self._current.root != previous.root:
                return True
        return False

    next_candidate_root = find_next_matching_node

    def matches(self) -> bool:
        """Whether the pattern matches anywhere (does not move this cursor)."""
        probe = search(self.pattern, self.graph, self.initial_bindings, self.relation_matches)
        return next(probe, None) is not None

    def __iter__(self) -> Iterator[Match]:
        while self.find():
            yield self._current

    # ── accessors ─────────────────────────────────────────────

    @property
    def current(self) -> Match:
        if self._current is None:
            raise NoMatchError("No current match; call find() first")
        return self._current

    def get_match(self):
        """Root node of the current match."""
        return self.current.root

    def get_node_names(self) -> Set[str]:
        """Names bound in the current match (initial bindings included)."""
        return set(self.current.bindings)

    def get_node(self, name: str):
        """
        Raises:
            UnboundNameError: If `name` is not bound in the current match
            NoMatchError: If there is no current match
        """
        bindings = self.current.bindings
        if name not in bindings:
            raise UnboundNameError(name)
        return bindings[name]

    @property
    def match_count(self) -> int:
        """Matches returned by find() since the last reset."""
        return self._count
