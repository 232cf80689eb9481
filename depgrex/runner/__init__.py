"""
Matcher Runner Package

Evaluates compiled patterns against dependency graphs.
"""

from .types import (
    MatchRequest,
    MatchRecord,
    MatchResponse,
    NodeRef,
)

from .constraint_eval import satisfies
from .search import search, witnesses
from .matcher import Match, PatternMatcher, NoMatchError, UnboundNameError

__all__ = [
    # Types
    'MatchRequest',
    'MatchRecord',
    'MatchResponse',
    'NodeRef',
    # Functions
    'satisfies',
    'search',
    'witnesses',
    # Matcher
    'Match',
    'PatternMatcher',
    'NoMatchError',
    'UnboundNameError',
]
