"""
Pattern DSL Parser and Renderer

Compiles dependency-graph pattern text into an immutable Pattern AST
(pattern_types.py) and renders a Pattern back to canonical text.

Grammar:
    pattern      ::= conjunction (":" conjunction)*
    conjunction  ::= node relation*
    node         ::= ["!"] "{" [attr (("," | ws) attr)*] "}" ["=" name]
    attr         ::= key ":" value
    value        ::= literal | '"' quoted '"' | "/" regex "/"
    relation     ::= ["!"] [depth] op [reln-type] target
                   | "[" relation+ ("|" relation+)* "]"
    depth        ::= int ["," [int]]          ("N," leaves the maximum open)
    op           ::= "<<" | ">>" | "<" | ">"
    reln-type    ::= identifier | "/" regex "/"       (immediately after op)
    target       ::= node | "(" conjunction ")"

    key          ::= word | value | lemma | tag | ner
    name         ::= [A-Za-z_][A-Za-z0-9_]*

Precedence (tightest first): node atom, relation, conjunction (all relations
written after a node apply to that node), partition (":").

Examples:
    "{}"                                             # every node
    "!{word:Bill}"                                   # every node except Bill
    "{word:/.*ill/}"                                 # regex, full-string match
    "{word:muffins} >nn {word:blueberry}"            # typed immediate dependent
    "{} 2,3<< {word:A}"                              # ancestor 2 or 3 edges up
    "{} >dobj ({} >expl {}=foo) >mod {}"             # nested target + binding
    "{}=a >> {word:E} : {}=a >> {word:B}"            # partition
    "{} [>nsubj {} | >dobj {}]"                      # disjunction

Rendering is canonical: a single depth "N" renders as "N,N", whitespace is
collapsed, and a target with relations of its own is parenthesized.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from .pattern_types import (
    ATTRIBUTE_KEYS,
    AttributeTest,
    DepthRange,
    NodeDescription,
    Pattern,
    PatternNode,
    Relation,
    RelationClause,
    RelationGroup,
    RelationOp,
)


logger = logging.getLogger(__name__)


_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_INT_RE = re.compile(r"\d+")
_LITERAL_RE = re.compile(r'[^\s,}"/][^\s,}"]*')
_RELN_TYPE_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*(?::[A-Za-z0-9_]+)*")

# Longest operators first so "<<" is not read as "<".
_OPERATORS = (RelationOp.ANCESTOR, RelationOp.DESCENDANT, RelationOp.GOVERNED_BY, RelationOp.GOVERNS)


class PatternSyntaxError(SyntaxError):
    """
    Raised when pattern text is malformed.

    Attributes:
        pattern: The pattern text being compiled
        position: 0-based offset of the offending character
        context: The pattern with a caret under `position`
    """

    def __init__(self, message: str, pattern: str, position: int):
        self.reason = message
        self.pattern = pattern
        self.position = position
        self.context = f"{pattern}\n{' ' * position}^"
        super().__init__(f"{message} at offset {position}\n{self.context}")
        self.text = pattern
        self.offset = position + 1


class _PatternReader:
    """Cursor over pattern text; one recursive-descent method per grammar rule."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    # ── low-level helpers ─────────────────────────────────────

    def error(self, message: str, position: Optional[int] = None) -> PatternSyntaxError:
        return PatternSyntaxError(message, self.text, self.pos if position is None else position)

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def accept(self, token: str) -> bool:
        if self.text.startswith(token, self.pos):
            self.pos += len(token)
            return True
        return False

    def expect(self, token: str, what: str) -> None:
        if not self.accept(token):
            found = repr(self.peek()) if not self.at_end() else "end of pattern"
            raise self.error(f"Expected {what}, found {found}")

    def match(self, regex: re.Pattern) -> Optional[str]:
        m = regex.match(self.text, self.pos)
        if not m:
            return None
        self.pos = m.end()
        return m.group(0)

    # ── grammar rules ─────────────────────────────────────────

    def parse_pattern(self) -> Tuple[PatternNode, ...]:
        clauses = [self.parse_conjunction()]
        self.skip_ws()
        while self.accept(":"):
            clauses.append(self.parse_conjunction())
            self.skip_ws()
        if not self.at_end():
            raise self.error(f"Unexpected {self.peek()!r}")
        return tuple(clauses)

    def parse_conjunction(self) -> PatternNode:
        description = self.parse_node()
        relations = self.parse_relations()
        return PatternNode(description=description, relations=relations)

    def parse_relations(self) -> Tuple[RelationClause, ...]:
        relations: List[RelationClause] = []
        while True:
            self.skip_ws()
            c = self.peek()
            if c == "[":
                relations.append(self.parse_group())
            elif c and (c in "!<>" or _INT_RE.match(self.text, self.pos)):
                relations.append(self.parse_relation())
            else:
                return tuple(relations)

    def parse_group(self) -> RelationGroup:
        start = self.pos
        self.expect("[", "'['")
        alternatives = []
        while True:
            relations = self.parse_relations()
            if not relations:
                raise self.error("Expected relation in group")
            alternatives.append(relations)
            self.skip_ws()
            if self.accept("|"):
                continue
            if self.accept("]"):
                break
            if self.at_end():
                raise self.error("Unbalanced '['", start)
            raise self.error(f"Expected '|' or ']', found {self.peek()!r}")
        return RelationGroup(alternatives=tuple(alternatives))

    def parse_relation(self) -> Relation:
        start = self.pos
        negated = self.accept("!")
        depth = None
        if _INT_RE.match(self.text, self.pos):
            depth = self.parse_depth()
            if not negated:
                negated = self.accept("!")

        op = None
        for candidate in _OPERATORS:
            if self.accept(candidate.value):
                op = candidate
                break
        if op is None:
            raise self.error("Expected relation operator ('<', '>', '<<' or '>>')")
        if depth is not None and op.is_immediate:
            raise self.error(f"Depth range not allowed on '{op.value}'", start)

        reln_type = self.parse_reln_type()

        self.skip_ws()
        target = self.parse_target()
        return Relation(op=op, target=target, reln_type=reln_type, negated=negated, depth=depth)

    def parse_depth(self) -> DepthRange:
        start = self.pos
        low = int(self.match(_INT_RE))
        high: Optional[int] = low
        if self.accept(","):
            # "N," leaves the maximum open
            raw = self.match(_INT_RE)
            high = int(raw) if raw is not None else None
        if high is not None and low > high:
            raise self.error(f"Invalid depth range {low},{high}: minimum exceeds maximum", start)
        return DepthRange(low, high)

    def parse_reln_type(self) -> Optional[str]:
        if self.peek() == "/":
            start = self.pos
            body = self.read_regex()
            try:
                re.compile(body)
            except re.error as e:
                raise self.error(f"Invalid relation regex: {e}", start)
            return f"/{body}/"
        return self.match(_RELN_TYPE_RE)

    def parse_target(self) -> PatternNode:
        c = self.peek()
        if c == "(":
            start = self.pos
            self.pos += 1
            self.skip_ws()
            node = self.parse_conjunction()
            self.skip_ws()
            if self.at_end():
                raise self.error("Unbalanced '('", start)
            self.expect(")", "')'")
            return node
        if c in ("{", "!"):
            return PatternNode(description=self.parse_node())
        raise self.error("Expected node description or '(' after relation")

    def parse_node(self) -> NodeDescription:
        self.skip_ws()
        negated = self.accept("!")
        if negated:
            self.skip_ws()
        start = self.pos
        self.expect("{", "'{'")
        tests = []
        while True:
            self.skip_ws()
            if self.accept("}"):
                break
            if self.at_end():
                raise self.error("Unbalanced '{'", start)
            tests.append(self.parse_attribute())
            self.skip_ws()
            self.accept(",")

        name = None
        if self.accept("="):
            name = self.match(_NAME_RE)
            if name is None:
                raise self.error("Expected node name after '='")
        return NodeDescription(tests=tuple(tests), negated=negated, name=name)

    def parse_attribute(self) -> AttributeTest:
        key_start = self.pos
        key = self.match(_KEY_RE)
        if key is None:
            raise self.error(f"Expected attribute key, found {self.peek()!r}")
        if key not in ATTRIBUTE_KEYS:
            raise self.error(f"Unknown attribute key {key!r}", key_start)
        self.skip_ws()
        self.expect(":", "':' after attribute key")
        self.skip_ws()

        c = self.peek()
        if c == "/":
            start = self.pos
            body = self.read_regex()
            try:
                return AttributeTest(key=key, value=body, is_regex=True)
            except re.error as e:
                raise self.error(f"Invalid regex: {e}", start)
        if c == '"':
            return AttributeTest(key=key, value=self.read_quoted())
        literal = self.match(_LITERAL_RE)
        if literal is None:
            raise self.error(f"Expected value for attribute {key!r}")
        return AttributeTest(key=key, value=literal)

    def read_regex(self) -> str:
        """Read /.../ starting at the opening slash; '\\/' stands for '/'."""
        start = self.pos
        self.pos += 1
        chars = []
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c == "\\" and self.pos + 1 < len(self.text):
                nxt = self.text[self.pos + 1]
                chars.append("/" if nxt == "/" else c + nxt)
                self.pos += 2
                continue
            if c == "/":
                self.pos += 1
                return "".join(chars)
            chars.append(c)
            self.pos += 1
        raise self.error("Unterminated regex", start)

    def read_quoted(self) -> str:
        start = self.pos
        self.pos += 1
        chars = []
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c == "\\" and self.pos + 1 < len(self.text):
                chars.append(self.text[self.pos + 1])
                self.pos += 2
                continue
            if c == '"':
                self.pos += 1
                return "".join(chars)
            chars.append(c)
            self.pos += 1
        raise self.error("Unterminated quoted value", start)


def compile_pattern(text: str) -> Pattern:
    """
    Compile pattern text into a Pattern.

    Args:
        text: Pattern string (e.g., "{word:muffins} >nn {word:blueberry}")

    Returns:
        Immutable Pattern, reusable across graphs and matchers

    Raises:
        PatternSyntaxError: If the text is malformed. Compilation is
            all-or-nothing.

    Examples:
        >>> p = compile_pattern("{} 2>> {word:J}")
        >>> str(p)
        '{} 2,2>> {word:J}'
        >>> p.root.relations[0].effective_range
        DepthRange(min_depth=2, max_depth=2)
    """
    if not isinstance(text, str) or not text.strip():
        raise PatternSyntaxError("Pattern must be a non-empty string", text if isinstance(text, str) else "", 0)

    clauses = _PatternReader(text).parse_pattern()
    pattern = Pattern(clauses=clauses, source=text)
    logger.debug("Compiled pattern %r (%d clause(s))", text, len(clauses))
    return pattern


def validate_pattern(text: str) -> Tuple[bool, Optional[str]]:
    """
    Validate pattern text without raising.

    Returns:
        (is_valid, error_message)

    Examples:
        >>> validate_pattern("{} > {}")
        (True, None)
        >>> validate_pattern("{} 3,2<< {}")[0]
        False
    """
    try:
        compile_pattern(text)
    except PatternSyntaxError as e:
        return False, f"{e.reason} at offset {e.position}"
    return True, None


# ============================================================================
# Rendering
# ============================================================================

def render_pattern(pattern: Pattern) -> str:
    """Reconstruct canonical pattern text from a Pattern."""
    return " : ".join(render_pattern_node(clause) for clause in pattern.clauses)


def render_pattern_node(node: PatternNode) -> str:
    parts = [render_description(node.description)]
    parts.extend(render_relation(r) for r in node.relations)
    return " ".join(parts)


def render_description(desc: NodeDescription) -> str:
    tests = ",".join(f"{t.key}:{_render_value(t)}" for t in desc.tests)
    text = "{" + tests + "}"
    if desc.negated:
        text = "!" + text
    if desc.name:
        text += "=" + desc.name
    return text


def render_relation(clause: RelationClause) -> str:
    if isinstance(clause, RelationGroup):
        alternatives = (" ".join(render_relation(r) for r in alt) for alt in clause.alternatives)
        return "[" + " | ".join(alternatives) + "]"

    head = "!" if clause.negated else ""
    if clause.depth is not None:
        high = "" if clause.depth.max_depth is None else str(clause.depth.max_depth)
        head += f"{clause.depth.min_depth},{high}"
    head += clause.op.value + _render_reln_type(clause.reln_type)

    target = clause.target
    if target.relations:
        return f"{head} ({render_pattern_node(target)})"
    return f"{head} {render_description(target.description)}"


def _render_reln_type(reln_type: Optional[str]) -> str:
    if not reln_type:
        return ""
    if len(reln_type) >= 2 and reln_type.startswith("/") and reln_type.endswith("/"):
        return "/" + reln_type[1:-1].replace("/", "\\/") + "/"
    return reln_type


def _render_value(test: AttributeTest) -> str:
    if test.is_regex:
        return "/" + test.value.replace("/", "\\/") + "/"
    if _LITERAL_RE.fullmatch(test.value):
        return test.value
    escaped = test.value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
