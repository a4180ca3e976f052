from collections.abc import Callable
from pathlib import Path

import pytest

from statewrap.expand.directive import DirectiveArgs, parse_directive
from statewrap.expand.options import ExpandOptions
from statewrap.internals.parser import StateWrapParser
from statewrap.internals.report import Reporter
from statewrap.syntax.ast import Item, TypeExpr

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(scope="session")
def parser() -> StateWrapParser:
    return StateWrapParser()


@pytest.fixture
def ty(parser: StateWrapParser) -> Callable[[str], TypeExpr]:
    return parser.parse_type


@pytest.fixture
def item(parser: StateWrapParser) -> Callable[[str], Item]:
    def _item(src: str) -> Item:
        return parser.parse_item(src, 0, len(src))

    return _item


@pytest.fixture
def directive(parser: StateWrapParser) -> Callable[[str], DirectiveArgs]:
    """Parse and validate the text between the directive's parentheses."""
    def _directive(text: str) -> DirectiveArgs:
        return parse_directive(parser.parse_directive_args(text, 0, len(text)))

    return _directive


@pytest.fixture
def reporter() -> Reporter:
    return Reporter()


@pytest.fixture
def options() -> ExpandOptions:
    return ExpandOptions()
