"""
Tests for the backtracking search and relation witnesses.
"""

import pytest

from depgrex import RelationTaxonomy, compile_pattern, parse_graph_notation
from depgrex.runner.search import relation_holds, search, witnesses
from tests.fixtures.graphs import cyclic_graph, root_words, words


def _relation(text):
    """First relation of a one-relation pattern."""
    return compile_pattern(text).root.relations[0]


class TestWitnesses:

    def test_reconvergent_paths_yield_once(self, lettered_graph):
        found = list(witnesses(lettered_graph, 1, _relation("{} >> {}"), RelationTaxonomy()))
        assert sorted(words(lettered_graph, found)) == list("BCDEFGHIJ")
        assert len(found) == len(set(found))

    def test_breadth_first_order(self, lettered_graph):
        found = list(witnesses(lettered_graph, 10, _relation("{} << {}"), RelationTaxonomy()))
        assert words(lettered_graph, found[:1]) == ["I"]
        assert words(lettered_graph, found)[-1] == "A"

    def test_immediate(self, lettered_graph):
        found = witnesses(lettered_graph, 5, _relation("{} < {}"), RelationTaxonomy())
        assert sorted(words(lettered_graph, found)) == ["B", "C", "D"]

    def test_depth_window(self, lettered_graph):
        found = witnesses(lettered_graph, 10, _relation("{} 2,2<< {}"), RelationTaxonomy())
        assert sorted(words(lettered_graph, found)) == ["E", "H"]

    def test_depth_zero_never_yields(self, lettered_graph):
        found = list(witnesses(lettered_graph, 1, _relation("{} 0,0>> {}"), RelationTaxonomy()))
        assert found == []

    @pytest.mark.parametrize("pattern", ["{} 0,0<< {}", "{} 0<< {}", "{} 0,0>> {}"])
    def test_zero_maximum_matches_nothing(self, muffins_graph, pattern):
        assert root_words(pattern, muffins_graph) == []

    def test_type_filter_checks_last_edge(self, lettered_graph):
        found = witnesses(lettered_graph, 10, _relation("{} <<mod {}"), RelationTaxonomy())
        assert sorted(words(lettered_graph, found)) == ["A", "E"]

    def test_cycle_terminates_unbounded(self):
        graph = cyclic_graph()
        found = witnesses(graph, 1, _relation("{} >> {}"), RelationTaxonomy())
        assert sorted(words(graph, found)) == ["w", "x", "y", "z"]

    def test_cycle_with_open_range(self):
        graph = cyclic_graph()
        # going round the cycle reaches every node at depth 3 or more
        found = witnesses(graph, 1, _relation("{} 3,>> {}"), RelationTaxonomy())
        assert sorted(words(graph, found)) == ["w", "x", "y", "z"]

    def test_cycle_with_exact_depth(self):
        graph = cyclic_graph()
        found = witnesses(graph, 1, _relation("{} 2,2>> {}"), RelationTaxonomy())
        assert words(graph, found) == ["z"]

    def test_custom_predicate(self, lettered_graph):
        def only_det(filter_label, actual):
            return actual == "det"

        found = witnesses(lettered_graph, 1, _relation("{} >>anything {}"), only_det)
        assert words(lettered_graph, found) == ["J"]


class TestSearch:

    def test_fresh_environment_per_result(self, muffins_graph):
        results = list(search(compile_pattern("{} > {}=d"), muffins_graph))
        envs = [env for _, env in results]
        assert len({id(env) for env in envs}) == len(envs)
        envs[0]["d"] = "changed"
        assert envs[1]["d"] != "changed"

    def test_initial_environment_untouched(self, muffins_graph):
        env = {"x": 1}
        list(search(compile_pattern("{}=y"), muffins_graph, env))
        assert env == {"x": 1}

    def test_lazy(self, lettered_graph):
        stream = search(compile_pattern("{} >> {}=d"), lettered_graph)
        root, env = next(stream)
        assert lettered_graph.word(root) == "A"

    def test_relation_holds_ignores_negation(self, muffins_graph):
        relation = _relation("{} !>nn {}")
        assert relation_holds(relation, 3, muffins_graph, {}, RelationTaxonomy())
        assert not relation_holds(relation, 1, muffins_graph, {}, RelationTaxonomy())


class TestNegatedRelations:

    def test_no_dependents(self, muffins_graph):
        assert sorted(root_words("{} !> {}", muffins_graph)) == ["Bill", "blueberry"]

    def test_no_typed_dependent(self, muffins_graph):
        assert sorted(root_words("{} !>nn {}", muffins_graph)) == ["Bill", "ate", "blueberry"]

    def test_negated_relation_binds_nothing(self, muffins_graph):
        matcher = compile_pattern("{}=a !> {}=b").matcher(muffins_graph)
        assert matcher.find()
        assert matcher.get_node_names() == {"a"}

    def test_negation_law(self, lettered_graph):
        """Roots of `{} !R T` are exactly the nodes with no R-witness satisfying T."""
        all_nodes = set(lettered_graph.nodes())
        positive = set(root_words("{} >> {word:H}", lettered_graph))
        negative = set(root_words("{} !>> {word:H}", lettered_graph))
        assert positive.isdisjoint(negative)
        assert positive | negative == set(words(lettered_graph, all_nodes))


class TestDisjunction:

    def test_either_branch(self, muffins_graph):
        assert sorted(root_words("{} [>subj {} | >nn {}]", muffins_graph)) == ["ate", "muffins"]

    def test_both_branches_count(self, muffins_graph):
        # ate satisfies both alternatives
        assert root_words("{} [>subj {} | >dobj {}]", muffins_graph) == ["ate", "ate"]

    def test_group_alongside_relation(self, muffins_graph):
        assert root_words("{} >subj {} [>dobj {} | >nn {}]", muffins_graph) == ["ate"]


class TestLaws:

    def test_bare_transitive_matches_open_range(self, lettered_graph):
        for target in "AEJ":
            assert sorted(root_words(f"{{}} << {{word:{target}}}", lettered_graph)) == \
                sorted(root_words(f"{{}} 1,<< {{word:{target}}}", lettered_graph))

    def test_single_depth_matches_pair(self, lettered_graph):
        assert sorted(root_words("{} 2<< {}", lettered_graph)) == \
            sorted(root_words("{} 2,2<< {}", lettered_graph))

    def test_range_is_union_of_depths(self, lettered_graph):
        """Witnesses in min..max are the union of the single-depth witnesses."""
        taxonomy = RelationTaxonomy()
        for node in lettered_graph.nodes():
            union = set()
            for d in (1, 2, 3):
                union |= set(witnesses(lettered_graph, node, _relation(f"{{}} {d}>> {{}}"), taxonomy))
            assert set(witnesses(lettered_graph, node, _relation("{} 1,3>> {}"), taxonomy)) == union

    @pytest.mark.parametrize("narrow,wide", [
        ("2,2", "1,3"),
        ("2,3", "0,10"),
        ("3,4", "3,"),
    ])
    def test_narrower_range_is_subset(self, lettered_graph, narrow, wide):
        for op in ("<<", ">>"):
            inner = set(root_words(f"{{}} {narrow}{op} {{}}=x", lettered_graph))
            outer = set(root_words(f"{{}} {wide}{op} {{}}=x", lettered_graph))
            assert inner <= outer

    def test_shared_name_resolves_to_one_node(self, lettered_graph):
        matcher = compile_pattern("{}=a > {}=x : {}=a >> {}=x").matcher(lettered_graph)
        for match in matcher:
            assert match.bindings["x"] in set(lettered_graph.graph.successors(match.root))

    @pytest.mark.parametrize("notation", [
        "[A x:[B y:E-5] x:[C y:E-5] x:[D y:E-5]]",
        "[A x:B-2 y:B-2]",
    ])
    def test_paths_collapse_to_one_witness(self, notation):
        graph = parse_graph_notation(notation)
        assert root_words("{word:A} >> {}=d", graph).count("A") == len(graph) - 1
