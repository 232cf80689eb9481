"""
Backtracking search

Enumerates every consistent assignment of a compiled Pattern against a
SemanticGraph as a lazy stream of (root, environment) pairs.

Semantics:
- Candidate roots are visited in graph node order.
- Relations on a node are processed left to right; each relation's witnesses
  multiply the results of the ones before it (cross-product join), and a
  name shared between branches must resolve to one node.
- A witness is a distinct node: several paths reaching the same node within
  the depth range yield it once.
- Partition clauses (":") are matched against the same root, each seeded
  with the environment produced by the previous one.
- Negated relations hold iff no witness satisfies the target; they bind
  nothing.

Environments are extended by copy, so abandoning a branch is all the
backtracking there is.
"""

from collections import deque
from typing import Any, Callable, Dict, Iterator, Optional, Sequence, Tuple

from ..pattern_types import Pattern, PatternNode, Relation, RelationClause, RelationGroup
from ..relations import RelationTaxonomy
from .constraint_eval import Environment, bind, satisfies


RelationMatches = Callable[[str, Optional[str]], bool]


def witnesses(graph, node, relation: Relation, relation_matches: RelationMatches) -> Iterator[Any]:
    """
    Distinct nodes related to `node` by `relation`, in breadth-first order.

    A node X is a witness when some walk of d edges from `node` (towards
    governors for < and <<, dependents for > and >>) ends at X with d inside
    the relation's depth range and the last edge's label accepted by the
    relation-type filter. Depth 0 never yields a witness.

    Walk states are (node, depth) when the range is bounded and
    (node, min(depth, min_depth)) when it is not, so cycles terminate.
    """
    depth_range = relation.effective_range
    low = max(depth_range.min_depth, 1)
    high = depth_range.max_depth
    if high is not None and high < low:
        return
    step = graph.governors if relation.op.walks_up else graph.dependents
    reln_type = relation.reln_type

    returned = set()
    seen = {(node, 0)}
    queue = deque([(node, 0)])
    while queue:
        current, depth = queue.popleft()
        next_depth = depth + 1
        for label, other in step(current):
            if (next_depth >= low and other not in returned
                    and (reln_type is None or relation_matches(reln_type, label))):
                returned.add(other)
                yield other
            if high is not None and next_depth >= high:
                continue
            state = (other, next_depth if high is not None else min(next_depth, low))
            if state not in seen:
                seen.add(state)
                queue.append((other, next_depth))


def match_node(
    pattern_node: PatternNode,
    node,
    graph,
    env: Environment,
    relation_matches: RelationMatches,
) -> Iterator[Environment]:
    """Environments under which `node` satisfies `pattern_node` and all its relations."""
    desc = pattern_node.description
    if not satisfies(desc, node, graph, env):
        return
    yield from _match_relations(pattern_node.relations, 0, node, graph, bind(desc, node, env), relation_matches)


def _match_relations(
    relations: Sequence[RelationClause],
    i: int,
    node,
    graph,
    env: Environment,
    relation_matches: RelationMatches,
) -> Iterator[Environment]:
    if i == len(relations):
        yield env
        return
    for extended in _match_clause(relations[i], node, graph, env, relation_matches):
        yield from _match_relations(relations, i + 1, node, graph, extended, relation_matches)


def _match_clause(
    clause: RelationClause,
    node,
    graph,
    env: Environment,
    relation_matches: RelationMatches,
) -> Iterator[Environment]:
    if isinstance(clause, RelationGroup):
        for alternative in clause.alternatives:
            yield from _match_relations(alternative, 0, node, graph, env, relation_matches)
        return

    if clause.negated:
        if not relation_holds(clause, node, graph, env, relation_matches):
            yield env
        return

    for witness in witnesses(graph, node, clause, relation_matches):
        yield from match_node(clause.target, witness, graph, env, relation_matches)


def relation_holds(
    relation: Relation,
    node,
    graph,
    env: Environment,
    relation_matches: RelationMatches,
) -> bool:
    """Whether some witness satisfies the relation's target (negation ignored)."""
    for witness in witnesses(graph, node, relation, relation_matches):
        for _ in match_node(relation.target, witness, graph, env, relation_matches):
            return True
    return False


def _match_partitions(
    clauses: Sequence[PatternNode],
    i: int,
    root,
    graph,
    env: Environment,
    relation_matches: RelationMatches,
) -> Iterator[Environment]:
    if i == len(clauses):
        yield env
        return
    for extended in match_node(clauses[i], root, graph, env, relation_matches):
        yield from _match_partitions(clauses, i + 1, root, graph, extended, relation_matches)


def search(
    pattern: Pattern,
    graph,
    env: Optional[Dict[str, Any]] = None,
    relation_matches: Optional[RelationMatches] = None,
) -> Iterator[Tuple[Any, Environment]]:
    """
    Lazily enumerate matches of `pattern` over `graph`.

    Args:
        pattern: Compiled Pattern
        graph: SemanticGraph (governors/dependents/attribute/nodes)
        env: Initial bindings; hard constraints for the whole search
        relation_matches: Relation-type predicate; defaults to exact labels

    Yields:
        (root node, environment) with a fresh environment dict per result
    """
    if relation_matches is None:
        relation_matches = RelationTaxonomy()
    base = dict(env or {})
    for root in graph.nodes():
        for result in _match_partitions(pattern.clauses, 0, root, graph, base, relation_matches):
            yield root, dict(result)
