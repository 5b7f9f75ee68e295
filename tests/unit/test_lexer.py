"""
Tests for the modal/epistemic formula lexer.

Tests cover tokenization of names, constants, every operator spelling,
delimiters, whitespace handling, error reporting, and the tie-breaking
rules that decide between keywords, atoms and multi-character symbols.
"""

from io import StringIO

import pytest

from modalparse.parser.lexer import (
    KEYWORDS,
    SPELLINGS,
    TOKEN_ORDER,
    FormulaLexer,
    LexerError,
    Token,
    locate,
)
from modalparse.utils.logger import LogLevel, ParserLogger


def _tokens(lexer: FormulaLexer, text: str) -> list[tuple[str, str]]:
    """Helper: return list of (kind, value) pairs from tokenizing text."""
    return [(tok.kind, tok.value) for tok in lexer.tokenize(text)]


def _kinds(lexer: FormulaLexer, text: str) -> list[str]:
    """Helper: return list of token kinds from tokenizing text."""
    return [tok.kind for tok in lexer.tokenize(text)]


class TestAtoms:
    """Test atom tokenization."""

    def test_single_letter(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "p") == [("ATOM", "p")]

    def test_letter_with_digits(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "q12") == [("ATOM", "q12")]

    def test_adjacent_letters_split(self, lexer: FormulaLexer) -> None:
        """Atoms are one letter; 'pq' is two atoms."""
        assert _tokens(lexer, "pq") == [("ATOM", "p"), ("ATOM", "q")]

    def test_uppercase_name(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "P") == [("ATOM", "P")]

    def test_agent_letter_is_atom(self, lexer: FormulaLexer) -> None:
        """A lone a..d is an atom; the grammar decides when it is an agent."""
        for name in "abcd":
            assert _tokens(lexer, name) == [("ATOM", name)]


class TestKeywordTieBreaks:
    """Test resolution between alphabetic keywords and atoms."""

    def test_lone_t_is_top(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "T") == [("TOP", "T")]

    def test_lone_f_is_bot(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "F") == [("BOT", "F")]

    def test_lone_a_is_forall(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "A") == [("FORALL", "A")]

    def test_lone_e_is_exists(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "E") == [("EXISTS", "E")]

    def test_t_with_digits_is_atom(self, lexer: FormulaLexer) -> None:
        """Longest match: 'T1' as an atom beats 'T' as a constant."""
        assert _tokens(lexer, "T1") == [("ATOM", "T1")]

    def test_a_with_digits_is_atom(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "A2") == [("ATOM", "A2")]

    def test_word_keywords(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "true false Forall Exists") == [
            "TOP", "BOT", "FORALL", "EXISTS",
        ]

    def test_word_keyword_beats_single_letters(self, lexer: FormulaLexer) -> None:
        """'Forall' is one keyword, not 'F' followed by letters."""
        assert _tokens(lexer, "Forall x") == [("FORALL", "Forall"), ("ATOM", "x")]

    def test_lowercase_t_is_atom(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "t") == [("ATOM", "t")]


class TestOperators:
    """Test every operator spelling."""

    @pytest.mark.parametrize("text", ["¬", "~", "!"])
    def test_not(self, lexer: FormulaLexer, text: str) -> None:
        assert _tokens(lexer, text) == [("NOT", text)]

    @pytest.mark.parametrize("text", ["∧", "&", "&&"])
    def test_and(self, lexer: FormulaLexer, text: str) -> None:
        assert _tokens(lexer, text) == [("AND", text)]

    @pytest.mark.parametrize("text", ["∨", "|", "||"])
    def test_or(self, lexer: FormulaLexer, text: str) -> None:
        assert _tokens(lexer, text) == [("OR", text)]

    @pytest.mark.parametrize("text", ["→", "->", "=>"])
    def test_implies(self, lexer: FormulaLexer, text: str) -> None:
        assert _tokens(lexer, text) == [("IMPLIES", text)]

    @pytest.mark.parametrize("text", ["↔", "<->", "<=>"])
    def test_iff(self, lexer: FormulaLexer, text: str) -> None:
        assert _tokens(lexer, text) == [("IFF", text)]

    @pytest.mark.parametrize("text", ["□", "[]"])
    def test_box(self, lexer: FormulaLexer, text: str) -> None:
        assert _tokens(lexer, text) == [("BOX", text)]

    @pytest.mark.parametrize("text", ["◊", "<>", "⋄"])
    def test_diamond(self, lexer: FormulaLexer, text: str) -> None:
        assert _tokens(lexer, text) == [("DIAMOND", text)]

    @pytest.mark.parametrize("text", ["∀", "∃"])
    def test_quantifier_symbols(self, lexer: FormulaLexer, text: str) -> None:
        assert _kinds(lexer, text) == ["FORALL" if text == "∀" else "EXISTS"]

    def test_comparison_spellings(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "<= >= ==") == ["LTE", "GTE", "EQ"]


class TestLongestMatch:
    """Test that multi-character spellings win over their prefixes."""

    def test_iff_beats_lte(self, lexer: FormulaLexer) -> None:
        """'<=>' is one biconditional, not '<=' followed by '>'."""
        assert _tokens(lexer, "p<=>q") == [
            ("ATOM", "p"), ("IFF", "<=>"), ("ATOM", "q"),
        ]

    def test_lte_alone(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "p<=q") == [
            ("ATOM", "p"), ("LTE", "<="), ("ATOM", "q"),
        ]

    def test_box_beats_bracket(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "[]p") == ["BOX", "ATOM"]

    def test_bracket_group(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "[p]") == ["LPAREN", "ATOM", "RPAREN"]

    def test_spaced_brackets_are_delimiters(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "[ ]") == ["LPAREN", "RPAREN"]

    def test_double_ampersand_single_token(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "p&&q") == [
            ("ATOM", "p"), ("AND", "&&"), ("ATOM", "q"),
        ]

    def test_arrow_beats_other_spellings(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "p->q") == ["ATOM", "IMPLIES", "ATOM"]

    def test_diamond_angle_brackets(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "<>p") == ["DIAMOND", "ATOM"]


class TestDelimiters:
    """Test delimiter tokenization."""

    def test_predicate_shape(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "P(x, y)") == [
            "ATOM", "LPAREN", "ATOM", "COMMA", "ATOM", "RPAREN",
        ]

    def test_agent_subscript(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "[]_a p") == [
            ("BOX", "[]"), ("UNDERSCORE", "_"), ("ATOM", "a"), ("ATOM", "p"),
        ]

    def test_quantifier_dot(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "A x. p") == ["FORALL", "ATOM", "DOT", "ATOM"]


class TestWhitespace:
    """Test whitespace and newline handling."""

    def test_spaces_ignored(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "  p   &   q  ") == ["ATOM", "AND", "ATOM"]

    def test_tabs_and_newlines_ignored(self, lexer: FormulaLexer) -> None:
        assert _kinds(lexer, "p\t&\n\nq") == ["ATOM", "AND", "ATOM"]

    def test_empty_input(self, lexer: FormulaLexer) -> None:
        assert _tokens(lexer, "") == []

    def test_offsets(self, lexer: FormulaLexer) -> None:
        tokens = list(lexer.tokenize("p ∧ q"))
        assert [tok.offset for tok in tokens] == [0, 2, 4]

    def test_token_records(self, lexer: FormulaLexer) -> None:
        tokens = list(lexer.tokenize("¬p"))
        assert tokens == [Token("NOT", "¬", 0), Token("ATOM", "p", 1)]


class TestLexerErrors:
    """Test lexer error handling."""

    def test_invalid_character(self, lexer: FormulaLexer) -> None:
        with pytest.raises(LexerError) as exc_info:
            list(lexer.tokenize("p $ q"))
        assert exc_info.value.offset == 2
        assert exc_info.value.char == "$"

    def test_error_position_on_later_line(self, lexer: FormulaLexer) -> None:
        with pytest.raises(LexerError) as exc_info:
            list(lexer.tokenize("p &\n  #"))
        assert exc_info.value.line == 2
        assert exc_info.value.column == 3

    def test_lone_digit(self, lexer: FormulaLexer) -> None:
        with pytest.raises(LexerError) as exc_info:
            list(lexer.tokenize("1"))
        assert exc_info.value.offset == 0

    def test_message_names_character(self, lexer: FormulaLexer) -> None:
        with pytest.raises(LexerError, match=r"'\?'"):
            list(lexer.tokenize("?"))

    def test_tokens_before_error_are_produced(self, lexer: FormulaLexer) -> None:
        stream = lexer.tokenize("p @")
        assert next(stream) == Token("ATOM", "p", 0)
        with pytest.raises(LexerError):
            next(stream)


class TestTables:
    """Test the published token tables."""

    def test_order_starts_with_separators(self) -> None:
        assert TOKEN_ORDER[:2] == ("WHITESPACE", "NEWLINE")

    def test_atom_precedes_agent(self) -> None:
        assert TOKEN_ORDER.index("ATOM") < TOKEN_ORDER.index("AGENT")

    def test_every_spelling_category_is_ordered(self) -> None:
        assert set(SPELLINGS) <= set(TOKEN_ORDER)

    def test_keywords(self) -> None:
        assert KEYWORDS["T"] == "TOP"
        assert KEYWORDS["Exists"] == "EXISTS"
        assert "<->" not in KEYWORDS

    def test_locate(self) -> None:
        assert locate("ab\ncd", 0) == (1, 1)
        assert locate("ab\ncd", 4) == (2, 2)


class TestTokenLogging:
    """Test token tracing through the logger."""

    def test_debug_traces_tokens(self) -> None:
        buf = StringIO()
        lexer = FormulaLexer(logger=ParserLogger(LogLevel.DEBUG, stream=buf))
        list(lexer.tokenize("p & q"))
        output = buf.getvalue()
        assert "[TOKEN] ATOM 'p' @ 0" in output
        assert "[TOKEN] AND '&' @ 2" in output

    def test_verbose_does_not_trace_tokens(self) -> None:
        buf = StringIO()
        lexer = FormulaLexer(logger=ParserLogger(LogLevel.VERBOSE, stream=buf))
        list(lexer.tokenize("p & q"))
        assert buf.getvalue() == ""
