"""
Shared API handlers.

Dict-in/dict-out entry points for services that expose the matcher over
HTTP or a queue. Request bodies are validated with the pydantic models in
runner/types.py; pattern syntax errors come back as error payloads rather
than exceptions.
"""
from typing import Any, Dict

from .graph_builder import build_semantic_graph, parse_graph_notation
from .pattern_dsl import PatternSyntaxError, compile_pattern, validate_pattern
from .relations import RelationTaxonomy, taxonomy_for_settings
from .runner.matcher import PatternMatcher
from .runner.types import MatchRequest, MatchResponse
from .settings import settings_from_dict


def _syntax_error_payload(e: PatternSyntaxError) -> Dict[str, Any]:
    return {
        "error_type": "parse_error",
        "message": e.reason,
        "position": e.position,
        "context": e.context,
    }


def handle_match(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Handle match endpoint.

    Args:
        data: Request body containing:
            - pattern: Pattern text (required)
            - graph: Graph data {'nodes': [...], 'edges': [...]} or
            - notation: Bracket notation graph
            - bindings: Optional initial bindings (name -> node index)
            - taxonomy: Optional relation hierarchy (parent -> children)
            - settings: Optional MatcherSettings fields
            - limit: Optional maximum number of matches

    Returns:
        MatchResponse dict

    Raises:
        ValueError: If 'pattern' is missing
        pydantic.ValidationError: If the request is otherwise malformed
    """
    if not data.get('pattern'):
        raise ValueError("Missing 'pattern' field")

    request = MatchRequest.model_validate(data)
    settings = settings_from_dict(request.settings)

    try:
        pattern = compile_pattern(request.pattern)
    except PatternSyntaxError as e:
        return MatchResponse(success=False, error=_syntax_error_payload(e)).model_dump()

    if request.graph is not None:
        graph = build_semantic_graph(request.graph, settings)
    else:
        graph = parse_graph_notation(request.notation, settings)

    if request.taxonomy is not None:
        relation_matches = RelationTaxonomy.from_hierarchy(request.taxonomy)
    else:
        relation_matches = taxonomy_for_settings(settings)

    matcher = PatternMatcher(
        pattern,
        graph,
        initial_bindings=request.bindings,
        relation_matches=relation_matches,
        settings=settings,
    )

    records = []
    truncated = False
    for match in matcher:
        if request.limit is not None and len(records) >= request.limit:
            truncated = True
            break
        records.append(match.to_record(graph))

    return MatchResponse(
        pattern=pattern.render(),
        matches=records,
        count=len(records),
        truncated=truncated,
    ).model_dump()


def handle_render(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Handle render endpoint: canonical text for a pattern.

    Args:
        data: Request body containing:
            - pattern: Pattern text (required)

    Returns:
        {"success": True, "pattern": canonical} or an error payload
    """
    text = data.get('pattern')
    if not text:
        raise ValueError("Missing 'pattern' field")

    try:
        pattern = compile_pattern(text)
    except PatternSyntaxError as e:
        return {"success": False, "error": _syntax_error_payload(e)}

    return {
        "success": True,
        "pattern": pattern.render(),
        "names": pattern.node_names,
    }


def handle_validate(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Handle validate endpoint.

    Args:
        data: Request body containing:
            - pattern: Pattern text (required)

    Returns:
        {"valid": bool, "error": Optional[str]}
    """
    text = data.get('pattern')
    if text is None:
        raise ValueError("Missing 'pattern' field")

    is_valid, error = validate_pattern(text)
    return {"valid": is_valid, "error": error}
