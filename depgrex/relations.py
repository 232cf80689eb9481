"""
Relation Taxonomy

Decides whether a relation-type filter written in a pattern (the "mod" in
`{} <<mod {}`) accepts a concrete edge label. The matcher only ever calls
the predicate `relation_matches(filter_label, actual_label) -> bool`, so any
callable with that signature can be injected in place of RelationTaxonomy.

Matching rules (RelationTaxonomy):
- No filter accepts every label.
- "/regex/" filters must match the whole label.
- Otherwise the label matches if it equals the filter or if one of its
  ancestors in the hierarchy does. A label "a:b" with no declared parent is
  treated as a subtype of "a".

The default taxonomy declares no hierarchy, so plain filters compare labels
exactly. Hierarchies are loaded from YAML:

    hierarchy:
      mod: [amod, advmod, det, poss]
      arg: [subj, comp]
      subj: [nsubj, csubj]
"""

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import yaml

from .settings import MatcherSettings


logger = logging.getLogger(__name__)

DEFAULT_TAXONOMY_PATH = Path(__file__).parent / "defaults" / "relations.yaml"


@lru_cache(maxsize=256)
def _compile_filter_regex(body: str) -> re.Pattern:
    return re.compile(body)


def is_regex_filter(filter_label: str) -> bool:
    return len(filter_label) >= 2 and filter_label.startswith("/") and filter_label.endswith("/")


class RelationTaxonomy:
    """Hierarchical relation-name predicate."""

    def __init__(self, parents: Optional[Dict[str, str]] = None):
        self._parents: Dict[str, str] = dict(parents or {})

    @classmethod
    def from_hierarchy(cls, hierarchy: Dict[str, List[str]]) -> 'RelationTaxonomy':
        """
        Build from a parent -> children mapping.

        Raises:
            ValueError: If a child is declared under two different parents
        """
        parents: Dict[str, str] = {}
        for parent, children in (hierarchy or {}).items():
            for child in children or []:
                if child in parents and parents[child] != parent:
                    raise ValueError(
                        f"Relation {child!r} declared under both {parents[child]!r} and {parent!r}"
                    )
                parents[child] = parent
        return cls(parents)

    def parent_of(self, label: str) -> Optional[str]:
        if label in self._parents:
            return self._parents[label]
        if ":" in label:
            return label.rsplit(":", 1)[0]
        return None

    def ancestors(self, label: str) -> Iterator[str]:
        """Proper ancestors of `label`, nearest first."""
        seen = {label}
        current = self.parent_of(label)
        while current is not None and current not in seen:
            yield current
            seen.add(current)
            current = self.parent_of(current)

    def matches(self, filter_label: Optional[str], actual_label: Optional[str]) -> bool:
        if not filter_label:
            return True
        if actual_label is None:
            return False
        if is_regex_filter(filter_label):
            return _compile_filter_regex(filter_label[1:-1]).fullmatch(actual_label) is not None
        if filter_label == actual_label:
            return True
        return any(a == filter_label for a in self.ancestors(actual_label))

    __call__ = matches

    def __len__(self) -> int:
        return len(self._parents)

    def __bool__(self) -> bool:
        # an empty hierarchy is still a usable predicate
        return True


def load_relation_taxonomy(path=None) -> RelationTaxonomy:
    """
    Load a relation hierarchy from YAML.

    Args:
        path: YAML file with a top-level `hierarchy` mapping. None returns the
            flat (exact-match) taxonomy.

    Returns:
        RelationTaxonomy; the flat taxonomy if the file is missing or unreadable
    """
    if path is None:
        return RelationTaxonomy()

    taxonomy_path = Path(path)
    if not taxonomy_path.exists():
        logger.warning("Relation taxonomy not found at %s; using exact matching", taxonomy_path)
        return RelationTaxonomy()

    try:
        with open(taxonomy_path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return RelationTaxonomy.from_hierarchy(data.get('hierarchy', {}))
    except (OSError, yaml.YAMLError, ValueError, AttributeError) as e:
        logger.error("Failed to load relation taxonomy from %s: %s", taxonomy_path, e)
        return RelationTaxonomy()


def english_taxonomy() -> RelationTaxonomy:
    """The shipped English dependency hierarchy (defaults/relations.yaml)."""
    return load_relation_taxonomy(DEFAULT_TAXONOMY_PATH)


def taxonomy_for_settings(settings: Optional[MatcherSettings]) -> RelationTaxonomy:
    if settings is None or not settings.taxonomy_path:
        return RelationTaxonomy()
    return load_relation_taxonomy(settings.taxonomy_path)
