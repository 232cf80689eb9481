"""
depgrex: pattern matching over dependency graphs.

    >>> from depgrex import compile, parse_graph_notation
    >>> graph = parse_graph_notation("[ate subj:Bill dobj:[muffins nn:blueberry]]")
    >>> matcher = compile("{word:muffins} >nn {word:blueberry}").matcher(graph)
    >>> matcher.find(), graph.word(matcher.get_match())
    (True, 'muffins')
"""

from .pattern_types import (
    AttributeKey,
    AttributeTest,
    DepthRange,
    NodeDescription,
    Pattern,
    PatternNode,
    Relation,
    RelationGroup,
    RelationOp,
)
from .pattern_dsl import PatternSyntaxError, compile_pattern, validate_pattern
from .graph_builder import (
    GraphNotationError,
    SemanticGraph,
    as_semantic_graph,
    build_semantic_graph,
    parse_graph_notation,
)
from .relations import RelationTaxonomy, english_taxonomy, load_relation_taxonomy
from .settings import MatcherSettings, settings_from_dict, settings_from_env
from .runner.matcher import Match, NoMatchError, PatternMatcher, UnboundNameError

compile = compile_pattern

__all__ = [
    # Pattern compiler
    'compile',
    'compile_pattern',
    'validate_pattern',
    'PatternSyntaxError',
    'Pattern',
    'PatternNode',
    'NodeDescription',
    'AttributeKey',
    'AttributeTest',
    'DepthRange',
    'Relation',
    'RelationGroup',
    'RelationOp',
    # Graphs
    'SemanticGraph',
    'GraphNotationError',
    'as_semantic_graph',
    'build_semantic_graph',
    'parse_graph_notation',
    # Relations
    'RelationTaxonomy',
    'english_taxonomy',
    'load_relation_taxonomy',
    # Settings
    'MatcherSettings',
    'settings_from_dict',
    'settings_from_env',
    # Matching
    'Match',
    'PatternMatcher',
    'NoMatchError',
    'UnboundNameError',
]
