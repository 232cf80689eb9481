"""
Matcher settings: configuration for graph adaptation and relation matching.

Callers may pass settings explicitly (e.g. from an API request body);
settings_from_env() reads the process environment for deployments that
configure the matcher once.
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


TAXONOMY_PATH_ENV = "DEPGREX_TAXONOMY_PATH"
RELATION_ATTRIBUTE_ENV = "DEPGREX_RELATION_ATTRIBUTE"


@dataclass
class MatcherSettings:
    """
    Tuning knobs for building graphs and matching relations.

    Field names match the wire format accepted by api_handlers.
    """

    relation_attribute: str = "relation"
    """Edge attribute holding the relation label on networkx graphs."""

    word_attribute: str = "word"
    """Node attribute used as a node's display label."""

    taxonomy_path: Optional[str] = None
    """YAML relation hierarchy; None means exact label matching."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def settings_from_dict(d: Optional[Dict[str, Any]]) -> MatcherSettings:
    """
    Construct MatcherSettings from a dict.

    Missing fields use defaults. Extra fields and non-string values are ignored.
    """
    if not d:
        return MatcherSettings()

    kwargs = {}
    for field_name in MatcherSettings.__dataclass_fields__:
        val = d.get(field_name)
        if isinstance(val, str) and val:
            kwargs[field_name] = val
    return MatcherSettings(**kwargs)


def settings_from_env() -> MatcherSettings:
    """Read settings overrides from DEPGREX_* environment variables."""
    return settings_from_dict({
        'taxonomy_path': os.environ.get(TAXONOMY_PATH_ENV),
        'relation_attribute': os.environ.get(RELATION_ATTRIBUTE_ENV),
    })
