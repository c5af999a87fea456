"""cssguide model layer -- public type re-exports."""

from cssguide.model.finding import Finding, Position, Severity
from cssguide.model.token import CommentStyle, Token, TokenKind
from cssguide.model.tree import (
    CommentNode,
    DeclarationNode,
    Document,
    Node,
    RuleSetNode,
    Selector,
)

__all__ = [
    "CommentNode",
    "CommentStyle",
    "DeclarationNode",
    "Document",
    "Finding",
    "Node",
    "Position",
    "RuleSetNode",
    "Selector",
    "Severity",
    "Token",
    "TokenKind",
]
