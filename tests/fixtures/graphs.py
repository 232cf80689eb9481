"""
Graph fixtures for testing.

Provides the dependency graphs the matcher tests run against.
"""

from collections import Counter
from typing import Iterable, List

from depgrex import SemanticGraph, compile_pattern, parse_graph_notation


SIMPLE_NOTATION = "[ate subj:Bill dobj:[muffins nn:blueberry]]"


def simple_graph() -> SemanticGraph:
    """
    ate -subj-> Bill
    ate -dobj-> muffins -nn-> blueberry
    """
    return parse_graph_notation(SIMPLE_NOTATION)


def complicated_graph() -> SemanticGraph:
    """
    Ten nodes A..J (indices 1..10) with several reconvergent paths.
    It isn't supposed to make linguistic sense.

        A -mod-> B -mark-> E
        A -dobj-> C -expl-> E
        A -iobj-> D -acomp-> E
        E -amod-> F -poss-> H
        E -advmod-> G -possessive-> H
        E -mod-> I
        H -agent-> I -det-> J
    """
    sg = SemanticGraph()
    for i, word in enumerate("ABCDEFGHIJ", start=1):
        sg.add_node(i, word)
    A, B, C, D, E, F, G, H, I, J = range(1, 11)
    sg.add_edge(A, B, "mod")
    sg.add_edge(A, C, "dobj")
    sg.add_edge(A, D, "iobj")
    sg.add_edge(B, E, "mark")
    sg.add_edge(C, E, "expl")
    sg.add_edge(D, E, "acomp")
    sg.add_edge(E, F, "amod")
    sg.add_edge(E, G, "advmod")
    sg.add_edge(E, I, "mod")
    sg.add_edge(F, H, "poss")
    sg.add_edge(G, H, "possessive")
    sg.add_edge(H, I, "agent")
    sg.add_edge(I, J, "det")
    sg.set_roots([A])
    return sg


def referenced_graph() -> SemanticGraph:
    """[ate subj:Bill dobj:[bill det:the]]"""
    return parse_graph_notation("[ate subj:Bill dobj:[bill det:the]]")


def cyclic_graph() -> SemanticGraph:
    """x -> y -> z -> x, plus z -> w."""
    return parse_graph_notation("[x-1 next:[y next:[z next:x-1 out:w]]]")


def root_words(pattern, graph: SemanticGraph) -> List[str]:
    """Words of every match root, in stream order."""
    if isinstance(pattern, str):
        pattern = compile_pattern(pattern)
    matcher = pattern.matcher(graph)
    words = []
    while matcher.find():
        words.append(graph.word(matcher.get_match()))
    return words


def assert_matches(pattern, graph: SemanticGraph, *expected: str) -> None:
    """
    Match roots must equal `expected` as a multiset (order is free).

    String patterns must also render back to themselves, whitespace
    collapsed, and the stream must stop right after the last match.
    """
    if isinstance(pattern, str):
        compiled = compile_pattern(pattern)
        assert " ".join(str(compiled).split()) == " ".join(pattern.split())
        pattern = compiled

    assert Counter(root_words(pattern, graph)) == Counter(expected)

    matcher = pattern.matcher(graph)
    for _ in expected:
        assert matcher.find()
    assert not matcher.find_next_matching_node()


def words(graph: SemanticGraph, nodes: Iterable) -> List[str]:
    return [graph.word(n) for n in nodes]
