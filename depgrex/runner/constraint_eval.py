"""
Constraint evaluation helpers

Evaluates a pattern NodeDescription against a concrete graph node:
- attribute tests: literal equality or full-string regex; a missing
  attribute fails its test
- negation: complements the conjunction of attribute tests
- names: a name already bound in the environment must denote this very
  node, whatever the attribute tests say

All functions are pure predicates; binding happens in search.py.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..pattern_types import AttributeTest, NodeDescription


Environment = Dict[str, Any]


def attribute_test_passes(test: AttributeTest, value: Optional[str]) -> bool:
    return test.test(value)


def node_tests_pass(desc: NodeDescription, node, graph) -> bool:
    """Attribute tests (ANDed) with the description's negation applied."""
    passed = all(attribute_test_passes(t, graph.attribute(node, t.key)) for t in desc.tests)
    return passed != desc.negated


def binding_allows(desc: NodeDescription, node, env: Optional[Environment]) -> bool:
    """False if the description's name is already bound to a different node."""
    if not desc.name or not env or desc.name not in env:
        return True
    return env[desc.name] == node


def satisfies(desc: NodeDescription, node, graph, env: Optional[Environment] = None) -> bool:
    """
    Check whether `node` satisfies `desc` under the current bindings.

    Args:
        desc: Node description from a compiled pattern
        node: Graph node key
        graph: SemanticGraph (anything exposing attribute(node, key))
        env: Current name -> node bindings

    Returns:
        True if the binding constraint and the attribute tests both hold
    """
    if not binding_allows(desc, node, env):
        return False
    return node_tests_pass(desc, node, graph)


def bind(desc: NodeDescription, node, env: Environment) -> Environment:
    """Environment extended with desc's name (a copy; `env` is untouched)."""
    if not desc.name:
        return env
    if desc.name in env and env[desc.name] == node:
        return env
    extended = dict(env)
    extended[desc.name] = node
    return extended
