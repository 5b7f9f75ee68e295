"""
Shared pytest fixtures for the modalparse test suite.

Provides reusable lexer and parser instances and a captured log stream
used across unit and integration tests.
"""

from io import StringIO

import pytest

from modalparse.parser.grammar import FormulaParser
from modalparse.parser.lexer import FormulaLexer


@pytest.fixture(scope="session")
def parser() -> FormulaParser:
    """A parser with default settings, shared across tests."""
    return FormulaParser()


@pytest.fixture
def lexer() -> FormulaLexer:
    """Return a fresh lexer instance."""
    return FormulaLexer()


@pytest.fixture
def log_buffer() -> StringIO:
    """In-memory stream for capturing logger output."""
    return StringIO()
