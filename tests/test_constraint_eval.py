"""
Tests for node description evaluation.
"""

from depgrex import compile_pattern
from depgrex.runner.constraint_eval import bind, binding_allows, node_tests_pass, satisfies


def _desc(text):
    return compile_pattern(text).root.description


class TestNodeTests:

    def test_empty_accepts_all(self, muffins_graph):
        assert all(node_tests_pass(_desc("{}"), n, muffins_graph) for n in muffins_graph.nodes())

    def test_conjunction(self, muffins_graph):
        muffins_graph.graph.nodes[3]['tag'] = 'NNS'
        assert node_tests_pass(_desc("{word:muffins,tag:NNS}"), 3, muffins_graph)
        assert not node_tests_pass(_desc("{word:muffins,tag:NN}"), 3, muffins_graph)

    def test_negation_complements_conjunction(self, muffins_graph):
        muffins_graph.graph.nodes[3]['tag'] = 'NNS'
        assert node_tests_pass(_desc("!{word:muffins,tag:NN}"), 3, muffins_graph)
        assert not node_tests_pass(_desc("!{word:muffins,tag:NNS}"), 3, muffins_graph)

    def test_missing_attribute(self, muffins_graph):
        assert not node_tests_pass(_desc("{lemma:eat}"), 1, muffins_graph)
        assert node_tests_pass(_desc("!{lemma:eat}"), 1, muffins_graph)

    def test_value_defaults_to_word(self, muffins_graph):
        assert node_tests_pass(_desc("{value:ate}"), 1, muffins_graph)


class TestBindings:

    def test_unbound_name_allows(self):
        assert binding_allows(_desc("{}=a"), 1, {})
        assert binding_allows(_desc("{}=a"), 1, None)

    def test_bound_name_must_agree(self):
        assert binding_allows(_desc("{}=a"), 1, {"a": 1})
        assert not binding_allows(_desc("{}=a"), 2, {"a": 1})

    def test_binding_and_attributes_both_apply(self, muffins_graph):
        desc = _desc("{word:Bill}=a")
        assert satisfies(desc, 2, muffins_graph, {"a": 2})
        assert not satisfies(desc, 1, muffins_graph, {"a": 1})
        assert not satisfies(desc, 2, muffins_graph, {"a": 1})

    def test_bind_copies(self):
        env = {"x": 1}
        extended = bind(_desc("{}=a"), 2, env)
        assert extended == {"x": 1, "a": 2}
        assert env == {"x": 1}

    def test_bind_unnamed_is_identity(self):
        env = {"x": 1}
        assert bind(_desc("{}"), 2, env) is env
