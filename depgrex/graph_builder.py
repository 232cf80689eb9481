"""
Graph Builder

Builds the read-only dependency graph the matcher runs against:
- SemanticGraph: adapter over a NetworkX MultiDiGraph exposing governors,
  dependents and node attributes
- build_semantic_graph: from the GraphData wire format (graph_types.py)
- parse_graph_notation: from bracket notation, e.g.
      "[ate subj:Bill dobj:[muffins nn:blueberry]]"

Node keys are 1-based token indices. Node attributes are the pattern
attribute keys (word, value, lemma, tag, ner); edges carry their relation
label under settings.relation_attribute (default "relation").
"""

import re
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import networkx as nx

from .graph_types import GraphData
from .settings import MatcherSettings


class GraphNotationError(ValueError):
    """Raised when bracket graph notation is malformed."""
    pass


class SemanticGraph:
    """
    Dependency graph as seen by the matcher.

    Wraps a directed NetworkX graph; a MultiDiGraph allows several labelled
    edges between the same pair of nodes. The matcher never mutates it.
    """

    def __init__(
        self,
        graph: Optional[nx.DiGraph] = None,
        roots: Optional[List[Any]] = None,
        settings: Optional[MatcherSettings] = None,
    ):
        settings = settings or MatcherSettings()
        self.graph = graph if graph is not None else nx.MultiDiGraph()
        self.relation_attribute = settings.relation_attribute
        self.word_attribute = settings.word_attribute
        self._roots = list(roots or [])

    # ── construction ──────────────────────────────────────────

    def add_node(self, index: int, word: str, **attributes) -> int:
        attributes.setdefault('value', word)
        self.graph.add_node(index, **{self.word_attribute: word}, **attributes)
        return index

    def add_edge(self, governor: int, dependent: int, relation: str) -> None:
        self.graph.add_edge(governor, dependent, **{self.relation_attribute: relation})

    def set_roots(self, roots: List[Any]) -> None:
        self._roots = list(roots)

    # ── adapter interface used by the matcher ─────────────────

    def nodes(self) -> List[Any]:
        """All nodes in natural (insertion) order."""
        return list(self.graph.nodes)

    def governors(self, node) -> Iterator[Tuple[Optional[str], Any]]:
        """(relation, governor) for each incoming edge."""
        for governor, _, relation in self.graph.in_edges(node, data=self.relation_attribute):
            yield relation, governor

    def dependents(self, node) -> Iterator[Tuple[Optional[str], Any]]:
        """(relation, dependent) for each outgoing edge."""
        for _, dependent, relation in self.graph.out_edges(node, data=self.relation_attribute):
            yield relation, dependent

    def attribute(self, node, key: str) -> Optional[str]:
        value = self.graph.nodes[node].get(key)
        return None if value is None else str(value)

    # ── lookups ───────────────────────────────────────────────

    def word(self, node) -> str:
        word = self.attribute(node, self.word_attribute)
        return word if word is not None else str(node)

    def node_by_index(self, index: int):
        """
        Raises:
            KeyError: If no node has this index
        """
        if index not in self.graph:
            raise KeyError(f"No node with index {index}")
        return index

    def node_by_word(self, word: str):
        """First node (in graph order) whose word is `word`, or None."""
        for node in self.graph.nodes:
            if self.word(node) == word:
                return node
        return None

    def roots(self) -> List[Any]:
        """Declared roots, else every node without governors."""
        if self._roots:
            return list(self._roots)
        return [n for n in self.graph.nodes if self.graph.in_degree(n) == 0]

    def __contains__(self, node) -> bool:
        try:
            return node in self.graph
        except TypeError:
            return False

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def __iter__(self):
        return iter(self.graph.nodes)

    # ── rendering ─────────────────────────────────────────────

    def to_notation(self) -> str:
        """
        Render as bracket notation.

        Nodes with more than one governor carry their index ("E-5") so the
        rendering can be parsed back into the same shape.
        """
        visited = set()
        parts = []
        for root in self.roots():
            if root not in visited:
                parts.append(self._render_node(root, visited))
        for node in self.graph.nodes:
            if node not in visited:
                parts.append(self._render_node(node, visited))
        return " ".join(parts)

    def _render_node(self, node, visited: set) -> str:
        label = self.word(node)
        tag = self.attribute(node, 'tag')
        if tag:
            label += f"/{tag}"
        if self.graph.in_degree(node) > 1 or node in visited:
            label += f"-{node}"
        if node in visited:
            return label
        visited.add(node)

        children = [f"{relation}:{self._render_node(dep, visited)}" for relation, dep in self.dependents(node)]
        if not children:
            return label
        return "[" + " ".join([label] + children) + "]"

    def __str__(self) -> str:
        return self.to_notation()

    def __repr__(self) -> str:
        return f"SemanticGraph({self.to_notation()!r})"


def build_semantic_graph(
    graph_data: Union[GraphData, Dict[str, Any]],
    settings: Optional[MatcherSettings] = None,
) -> SemanticGraph:
    """
    Build a SemanticGraph from graph data.

    Args:
        graph_data: GraphData or its dict payload:
            {'nodes': [{'index': 1, 'word': 'ate', ...}, ...],
             'edges': [{'from': 1, 'to': 2, 'relation': 'subj'}, ...],
             'roots': [1]}
        settings: Optional MatcherSettings (attribute names)

    Returns:
        SemanticGraph with nodes keyed by index

    Raises:
        pydantic.ValidationError: If the payload is malformed
    """
    if not isinstance(graph_data, GraphData):
        graph_data = GraphData.model_validate(graph_data)

    sg = SemanticGraph(settings=settings)
    for node in graph_data.nodes:
        extra = {k: v for k, v in node.model_dump(exclude={'index', 'word'}).items() if v is not None}
        sg.add_node(node.index, node.word, **extra)

    for edge in graph_data.edges:
        sg.add_edge(edge.governor, edge.dependent, edge.relation)

    sg.set_roots(graph_data.roots)
    return sg


def as_semantic_graph(graph, settings: Optional[MatcherSettings] = None) -> SemanticGraph:
    """
    Coerce supported graph inputs to a SemanticGraph.

    Accepts SemanticGraph, directed NetworkX graphs, GraphData, its dict
    payload, or bracket notation text.
    """
    if isinstance(graph, SemanticGraph):
        return graph
    if isinstance(graph, nx.Graph):
        if not graph.is_directed():
            raise TypeError("Dependency graphs must be directed")
        return SemanticGraph(graph, settings=settings)
    if isinstance(graph, (GraphData, dict)):
        return build_semantic_graph(graph, settings)
    if isinstance(graph, str):
        return parse_graph_notation(graph, settings)
    raise TypeError(f"Unsupported graph type: {type(graph).__name__}")


# ============================================================================
# Bracket notation
# ============================================================================

_TOKEN_RE = re.compile(r"\[|\]|[^\s\[\]]+")
_WORD_SPEC_RE = re.compile(r"(?P<word>.+?)(?:/(?P<tag>[^/]+?))?(?:-(?P<index>\d+))?")


class _NotationParser:
    """
    Recursive-descent parser for bracket notation.

        graph  ::= item+
        item   ::= word-spec | "[" word-spec (rel ":" item)* "]"
        word-spec ::= word ["/" tag] ["-" index]

    An explicit index refers back to an existing node, giving it another
    governor.
    """

    def __init__(self, text: str, settings: Optional[MatcherSettings]):
        self.text = text
        self.tokens = _TOKEN_RE.findall(text)
        self.pos = 0
        self.sg = SemanticGraph(settings=settings)
        self.next_index = 1

    def error(self, message: str) -> GraphNotationError:
        return GraphNotationError(f"{message} in graph notation: {self.text!r}")

    def peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self) -> str:
        token = self.peek()
        if token is None:
            raise self.error("Unexpected end")
        self.pos += 1
        return token

    def parse(self) -> SemanticGraph:
        if not self.tokens:
            raise self.error("Empty graph")
        roots = []
        while self.peek() is not None:
            roots.append(self.parse_item())
        self.sg.set_roots(roots)
        return self.sg

    def parse_item(self) -> int:
        token = self.take()
        if token == "]":
            raise self.error("Unbalanced ']'")
        if token != "[":
            return self.node_for(token)

        head = self.take()
        if head in ("[", "]"):
            raise self.error("Expected word after '['")
        node = self.node_for(head)
        while True:
            token = self.peek()
            if token is None:
                raise self.error("Unbalanced '['")
            if token == "]":
                self.pos += 1
                return node
            self.pos += 1
            if token == "[" or ":" not in token:
                raise self.error(f"Expected 'relation:dependent', found {token!r}")
            if token.endswith(":"):
                relation = token[:-1]
                child = self.parse_item()
            else:
                relation, spec = token.rsplit(":", 1)
                child = self.node_for(spec)
            if not relation:
                raise self.error(f"Missing relation in {token!r}")
            self.sg.add_edge(node, child, relation)

    def node_for(self, spec: str) -> int:
        m = _WORD_SPEC_RE.fullmatch(spec)
        if not m:
            raise self.error(f"Bad word {spec!r}")
        word, tag, index = m.group('word'), m.group('tag'), m.group('index')

        if index is not None:
            index = int(index)
            if index in self.sg:
                if self.sg.word(index) != word:
                    raise self.error(f"Index {index} already used by {self.sg.word(index)!r}")
                return index
        else:
            while self.next_index in self.sg:
                self.next_index += 1
            index = self.next_index

        attributes = {'tag': tag} if tag else {}
        return self.sg.add_node(index, word, **attributes)


def parse_graph_notation(text: str, settings: Optional[MatcherSettings] = None) -> SemanticGraph:
    """
    Parse bracket notation into a SemanticGraph.

    Examples:
        >>> sg = parse_graph_notation("[ate subj:Bill dobj:[muffins nn:blueberry]]")
        >>> [sg.word(n) for n in sg.nodes()]
        ['ate', 'Bill', 'muffins', 'blueberry']
        >>> str(sg)
        '[ate subj:Bill dobj:[muffins nn:blueberry]]'

    Raises:
        GraphNotationError: If the notation is malformed
    """
    if not isinstance(text, str) or not text.strip():
        raise GraphNotationError("Graph notation must be a non-empty string")
    return _NotationParser(text, settings).parse()
