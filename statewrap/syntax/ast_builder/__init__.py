"""Lark tree to AST conversion."""
from statewrap.syntax.ast_builder.builder import ASTBuilder

__all__ = ["ASTBuilder"]
