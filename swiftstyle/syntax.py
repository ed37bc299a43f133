"""Swift syntax service — token classification and enclosing structure kinds.

The grammar only tokenizes. It never rejects partial code: any character no
other rule accepts falls through to ``other``. Structure (braces, statements,
calls) is then recovered from the token stream with bracket matching.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

logger = logging.getLogger(__name__)


class SyntaxKind(str, Enum):
    """Coarse classification of a single token."""

    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    COMMENT = "comment"
    STRING = "string"
    NUMBER = "number"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class StructureKind(str, Enum):
    """Kinds of structural nodes the syntax map can report."""

    BRACE = "brace"
    STATEMENT = "statement"
    CALL = "call"

    def __str__(self) -> str:
        return self.value


SWIFT_KEYWORDS = frozenset(
    {
        "associatedtype",
        "as",
        "break",
        "case",
        "catch",
        "class",
        "continue",
        "default",
        "defer",
        "deinit",
        "do",
        "else",
        "enum",
        "extension",
        "fallthrough",
        "false",
        "fileprivate",
        "for",
        "func",
        "guard",
        "if",
        "import",
        "in",
        "init",
        "inout",
        "internal",
        "is",
        "let",
        "nil",
        "open",
        "operator",
        "private",
        "protocol",
        "public",
        "repeat",
        "rethrows",
        "return",
        "self",
        "Self",
        "static",
        "struct",
        "subscript",
        "super",
        "switch",
        "throw",
        "throws",
        "true",
        "try",
        "typealias",
        "var",
        "where",
        "while",
    }
)

# Keywords that open a statement owning the next top-level `{ ... }`
STATEMENT_KEYWORDS = frozenset(
    {"if", "guard", "for", "while", "repeat", "switch", "do", "catch", "defer"}
)

SWIFT_TOKEN_GRAMMAR = Grammar(
    r'''
    tokens           = token*
    token            = comment / string / number / word / operator / punct / space / other
    comment          = line_comment / block_comment
    line_comment     = ~r"//[^\n]*"
    block_comment    = ~r"/\*[\s\S]*?\*/"
    string           = multiline_string / line_string
    multiline_string = ~r'"""[\s\S]*?"""'
    line_string      = ~r'"(?:[^"\\\n]|\\.)*"'
    number           = ~r"0[xob][0-9a-fA-F_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?"
    word             = ~r"`[^`\n]+`|[^\W\d]\w*"
    operator         = ~r"\.\.[.<]|[-+*/%<>=!&|^~?]+"
    punct            = ~r"[(){}\[\],:;.@#\\]"
    space            = ~r"\s+"
    other            = ~r"."s
    '''
)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}


@dataclass(frozen=True)
class SyntaxToken:
    """A classified token; offsets are character offsets."""

    kind: SyntaxKind
    offset: int
    length: int
    text: str

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True)
class StructureNode:
    """A structural node; offsets are UTF-8 byte offsets."""

    kind: StructureKind
    offset: int
    length: int
    name: str = ""

    def contains(self, byte_offset: int) -> bool:
        return self.offset <= byte_offset < self.offset + self.length


class SyntaxQuery(Protocol):
    """What a rule may ask of a syntax service."""

    def kinds_in_range(self, start: int, end: int) -> list[SyntaxKind]:
        """Kinds of the tokens overlapping ``[start, end)``, in order."""
        ...

    def kinds_for_byte_offset(self, byte_offset: int) -> list[StructureKind]:
        """Enclosing structure kinds, outermost first."""
        ...

    def comment_tokens(self) -> list[SyntaxToken]:
        ...


# ── Tokenizer ────────────────────────────────────────────────────────────────


class _TokenCollector(NodeVisitor):
    """Turns the parse tree into a flat list of SyntaxTokens."""

    def visit_tokens(self, node: Node, visited_children: list) -> list[SyntaxToken]:
        return [tok for tok in visited_children if isinstance(tok, SyntaxToken)]

    def visit_token(self, node: Node, visited_children: list):
        return visited_children[0]

    def visit_comment(self, node: Node, visited_children: list) -> SyntaxToken:
        return _token(SyntaxKind.COMMENT, node)

    def visit_string(self, node: Node, visited_children: list) -> SyntaxToken:
        return _token(SyntaxKind.STRING, node)

    def visit_number(self, node: Node, visited_children: list) -> SyntaxToken:
        return _token(SyntaxKind.NUMBER, node)

    def visit_word(self, node: Node, visited_children: list) -> SyntaxToken:
        if node.text in SWIFT_KEYWORDS:
            return _token(SyntaxKind.KEYWORD, node)
        return _token(SyntaxKind.IDENTIFIER, node)

    def visit_operator(self, node: Node, visited_children: list) -> SyntaxToken:
        return _token(SyntaxKind.OPERATOR, node)

    def visit_punct(self, node: Node, visited_children: list) -> SyntaxToken:
        return _token(SyntaxKind.PUNCTUATION, node)

    def visit_other(self, node: Node, visited_children: list) -> SyntaxToken:
        return _token(SyntaxKind.OTHER, node)

    def visit_space(self, node: Node, visited_children: list) -> None:
        return None

    def generic_visit(self, node: Node, visited_children: list):
        return visited_children or node


def _token(kind: SyntaxKind, node: Node) -> SyntaxToken:
    return SyntaxToken(kind=kind, offset=node.start, length=node.end - node.start, text=node.text)


def tokenize(text: str) -> list[SyntaxToken]:
    """Tokenize Swift source. Whitespace is dropped; nothing is ever rejected."""
    if not text:
        return []
    tree = SWIFT_TOKEN_GRAMMAR.parse(text)
    return _TokenCollector().visit(tree)


# ── Structure ────────────────────────────────────────────────────────────────


def _match_delimiters(tokens: list[SyntaxToken]) -> dict[int, int]:
    """Pair bracket token indices in both directions. Unbalanced ones stay unpaired."""
    pairs: dict[int, int] = {}
    stacks: dict[str, list[int]] = {opener: [] for opener in _OPENERS}
    for index, tok in enumerate(tokens):
        if tok.kind is not SyntaxKind.PUNCTUATION:
            continue
        if tok.text in _OPENERS:
            stacks[tok.text].append(index)
        elif tok.text in _CLOSERS:
            stack = stacks[_CLOSERS[tok.text]]
            if stack:
                opener = stack.pop()
                pairs[opener] = index
                pairs[index] = opener
    return pairs


def _after_dot(tokens: list[SyntaxToken], index: int) -> bool:
    return index > 0 and tokens[index - 1].text == "."


def _is_callee(tokens: list[SyntaxToken], index: int) -> bool:
    tok = tokens[index]
    if tok.kind is SyntaxKind.IDENTIFIER:
        return True
    if tok.kind is SyntaxKind.KEYWORD:
        return _after_dot(tokens, index)
    return tok.text in (")", "]")


def _is_receiver(tok: SyntaxToken) -> bool:
    return tok.kind in (SyntaxKind.IDENTIFIER, SyntaxKind.KEYWORD) or tok.text in (")", "]")


def _parent_indices(nodes: list[StructureNode]) -> list[int]:
    """Index of each node's enclosing node (-1 at top level).

    ``nodes`` must be sorted outermost first. A node is popped once a later
    node starts at or after its end, so the chain from any node holds every
    earlier node still open at its start.
    """
    parents: list[int] = []
    stack: list[int] = []
    for index, node in enumerate(nodes):
        while stack and nodes[stack[-1]].offset + nodes[stack[-1]].length <= node.offset:
            stack.pop()
        parents.append(stack[-1] if stack else -1)
        stack.append(index)
    return parents


class SwiftSyntaxMap:
    """Token map plus structure map for one buffer.

    ``byte_offset`` converts character offsets into UTF-8 byte offsets; the
    structure map is keyed by bytes, the token map by characters.
    """

    def __init__(self, text: str, byte_offset: Callable[[int], int]) -> None:
        self.text = text
        self._byte_offset = byte_offset
        self.tokens = tokenize(text)
        self._token_ends = [tok.end for tok in self.tokens]
        self._code = [
            tok
            for tok in self.tokens
            if tok.kind not in (SyntaxKind.COMMENT, SyntaxKind.STRING)
        ]
        self._pairs = _match_delimiters(self._code)
        self.structure = self._build_structure()
        self._structure_starts = [node.offset for node in self.structure]
        self._parents = _parent_indices(self.structure)
        logger.debug(
            "Syntax map: %d tokens, %d structure nodes",
            len(self.tokens),
            len(self.structure),
        )

    # ── SyntaxQuery ──────────────────────────────────────────────────────

    def kinds_in_range(self, start: int, end: int) -> list[SyntaxKind]:
        index = bisect.bisect_right(self._token_ends, start)
        kinds: list[SyntaxKind] = []
        while index < len(self.tokens) and self.tokens[index].offset < end:
            kinds.append(self.tokens[index].kind)
            index += 1
        return kinds

    def kinds_for_byte_offset(self, byte_offset: int) -> list[StructureKind]:
        # Every node containing the offset sits on the parent chain of the
        # last node starting at or before it
        index = bisect.bisect_right(self._structure_starts, byte_offset) - 1
        kinds: list[StructureKind] = []
        while index >= 0:
            node = self.structure[index]
            if node.contains(byte_offset):
                kinds.append(node.kind)
            index = self._parents[index]
        kinds.reverse()
        return kinds

    def comment_tokens(self) -> list[SyntaxToken]:
        return [tok for tok in self.tokens if tok.kind is SyntaxKind.COMMENT]

    # ── Building ─────────────────────────────────────────────────────────

    def _build_structure(self) -> list[StructureNode]:
        nodes: list[StructureNode] = []
        code = self._code

        for index, tok in enumerate(code):
            if (
                tok.kind is SyntaxKind.KEYWORD
                and tok.text in STATEMENT_KEYWORDS
                and not _after_dot(code, index)
            ):
                end = self._statement_end(index)
                nodes.append(self._node(StructureKind.STATEMENT, tok.offset, end, tok.text))
            elif tok.kind is SyntaxKind.PUNCTUATION and tok.text == "{":
                nodes.append(self._node(StructureKind.BRACE, tok.offset, self._close_end(index)))
            elif (
                tok.kind is SyntaxKind.PUNCTUATION
                and tok.text == "("
                and index > 0
                and code[index - 1].end == tok.offset
                and _is_callee(code, index - 1)
            ):
                start = code[self._chain_start(index - 1)].offset
                end = self._call_end(index)
                nodes.append(self._node(StructureKind.CALL, start, end, code[index - 1].text))

        # Outermost first: earlier start, then longer span
        nodes.sort(key=lambda node: (node.offset, -node.length))
        return nodes

    def _node(self, kind: StructureKind, start: int, end: int, name: str = "") -> StructureNode:
        byte_start = self._byte_offset(start)
        return StructureNode(
            kind=kind,
            offset=byte_start,
            length=self._byte_offset(end) - byte_start,
            name=name,
        )

    def _close_end(self, index: int) -> int:
        close = self._pairs.get(index)
        if close is None:
            return len(self.text)
        return self._code[close].end

    def _statement_end(self, index: int) -> int:
        code = self._code
        position = index + 1
        while position < len(code):
            tok = code[position]
            if tok.kind is SyntaxKind.PUNCTUATION:
                if tok.text == "{":
                    return self._close_end(position)
                if tok.text in ("(", "["):
                    close = self._pairs.get(position)
                    if close is None:
                        return len(self.text)
                    position = close + 1
                    continue
                if tok.text in (")", "]", "}"):
                    # Closes an enclosing scope before any body was found
                    return tok.offset
            position += 1
        return len(self.text)

    def _chain_start(self, index: int) -> int:
        """Walk back over a postfix chain like ``foo().bar`` to its first token."""
        code = self._code
        position = index
        while True:
            tok = code[position]
            if tok.text in (")", "]") and position in self._pairs:
                position = self._pairs[position]
                if (
                    position > 0
                    and code[position - 1].end == code[position].offset
                    and _is_callee(code, position - 1)
                ):
                    position -= 1
                    continue
            if _after_dot(code, position) and position > 1 and _is_receiver(code[position - 2]):
                position -= 2
                continue
            return position

    def _call_end(self, index: int) -> int:
        code = self._code
        close = self._pairs.get(index)
        if close is None:
            return len(self.text)
        following = close + 1
        if following < len(code) and code[following].text == "{":
            # Trailing closure
            return self._close_end(following)
        return code[close].end
