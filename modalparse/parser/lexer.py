"""
Lexical analyzer for modal/epistemic logic formulas.

Tokenizes formula strings into a stream of classified tokens (names,
connectives, modal operators, quantifiers, constants, delimiters) that
can be consumed by the parser.

Every category accepts several spellings (see ``SPELLINGS``).  At each
position the longest matching spelling wins; equal-length matches are
resolved by the category order in ``TOKEN_ORDER``.  This makes a lone
``T``, ``F``, ``A`` or ``E`` a keyword, ``T1`` an atom, ``<=>`` a
biconditional rather than ``<=`` followed by ``>``, and a lone ``a``..``d``
an atom rather than an agent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

import ply.lex as lex
from ply.lex import TOKEN

from modalparse.utils.logger import LogLevel, ParserLogger


TOKEN_ORDER: Tuple[str, ...] = (
    "WHITESPACE", "NEWLINE",
    "LTE", "GTE", "EQ",
    "LPAREN", "RPAREN",
    "NOT", "AND", "OR", "IMPLIES", "IFF",
    "BOX", "DIAMOND",
    "TOP", "BOT",
    "FORALL", "EXISTS",
    "DOT", "COMMA", "UNDERSCORE",
    "ATOM", "AGENT",
)

SPELLINGS: Dict[str, Tuple[str, ...]] = {
    "LTE": ("<=",),
    "GTE": (">=",),
    "EQ": ("==",),
    "LPAREN": ("(", "["),
    "RPAREN": (")", "]"),
    "NOT": ("¬", "~", "!"),
    "AND": ("∧", "&", "&&"),
    "OR": ("∨", "|", "||"),
    "IMPLIES": ("→", "->", "=>"),
    "IFF": ("↔", "<->", "<=>"),
    "BOX": ("□", "[]"),
    "DIAMOND": ("◊", "<>", "⋄"),
    "TOP": ("⊤", "T", "true"),
    "BOT": ("⊥", "F", "false"),
    "FORALL": ("∀", "Forall", "A"),
    "EXISTS": ("∃", "Exists", "E"),
    "DOT": (".",),
    "COMMA": (",",),
    "UNDERSCORE": ("_",),
}

# Alphabetic spellings collide with atoms and are matched by the atom rule.
KEYWORDS: Dict[str, str] = {
    spelling: kind
    for kind, spellings in SPELLINGS.items()
    for spelling in spellings
    if spelling.isalpha()
}


def _alternatives(kind: str) -> str:
    """Regex matching the non-alphabetic spellings of ``kind``, longest first."""
    spellings = [s for s in SPELLINGS[kind] if not s.isalpha()]
    spellings.sort(key=len, reverse=True)
    return "|".join(re.escape(s) for s in spellings)


# Whole-word keywords are tried before the atom pattern, which can only
# ever match one letter plus digits and so never outruns them.
_WORD_PATTERN = "|".join(
    re.escape(word) for word in sorted(KEYWORDS, key=len, reverse=True) if len(word) > 1
)


def locate(text: str, offset: int) -> Tuple[int, int]:
    """Return the 1-based (line, column) of ``offset`` in ``text``."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


class LexerError(Exception):
    """
    Exception raised for lexical analysis errors.

    Attributes:
        offset: Character offset of the offending character.
        char: The offending character.
        line: 1-based line number.
        column: 1-based column number.
    """

    def __init__(self, text: str, offset: int) -> None:
        self.offset = offset
        self.char = text[offset]
        self.line, self.column = locate(text, offset)
        super().__init__(
            f"Invalid character {self.char!r} at index {offset} "
            f"(line {self.line}, column {self.column})"
        )


@dataclass(frozen=True)
class Token:
    """
    A classified lexical token.

    Attributes:
        kind: Token category name (e.g. "IFF", "ATOM").
        value: The literal text matched.
        offset: Character offset of the token in the input.
    """

    kind: str
    value: str
    offset: int


class FormulaLexer:
    """
    Lexical analyzer for modal/epistemic formulas.

    Wraps a ply lexer.  Rules are tried in definition order and the first
    match wins, so within the rule list longer spellings come first; this
    reproduces longest-match tokenization for the spelling table.

    Token Types:
        TOP, BOT              - Truth constants
        ATOM                  - Names (one letter, optional digits)
        NOT                   - Negation
        AND, OR, IMPLIES, IFF - Binary connectives
        BOX, DIAMOND          - Modal operators
        UNDERSCORE            - Agent separator in []_a / <>_a
        FORALL, EXISTS, DOT   - Quantifiers and the scope dot
        LPAREN, RPAREN, COMMA - Delimiters
        LTE, GTE, EQ          - Comparison spellings, never consumed by the grammar
        AGENT                 - Declared after ATOM, so never produced
    """

    tokens = tuple(kind for kind in TOKEN_ORDER if kind not in ("WHITESPACE", "NEWLINE"))

    # Ignored characters
    t_ignore = " \t"

    def __init__(self, logger: Optional[ParserLogger] = None) -> None:
        self.logger: ParserLogger = logger or ParserLogger(LogLevel.SILENT)
        self._lexer = lex.lex(module=self)

    # Ignore newlines
    def t_newline(self, t):
        r"\n+"
        t.lexer.lineno += len(t.value)

    # <-> and <=> must come before <=
    @TOKEN(_alternatives("IFF"))
    def t_IFF(self, t):
        return t

    @TOKEN(_alternatives("IMPLIES"))
    def t_IMPLIES(self, t):
        return t

    @TOKEN(_alternatives("LTE"))
    def t_LTE(self, t):
        return t

    @TOKEN(_alternatives("GTE"))
    def t_GTE(self, t):
        return t

    @TOKEN(_alternatives("EQ"))
    def t_EQ(self, t):
        return t

    # [] must come before [
    @TOKEN(_alternatives("BOX"))
    def t_BOX(self, t):
        return t

    @TOKEN(_alternatives("DIAMOND"))
    def t_DIAMOND(self, t):
        return t

    @TOKEN(_alternatives("LPAREN"))
    def t_LPAREN(self, t):
        return t

    @TOKEN(_alternatives("RPAREN"))
    def t_RPAREN(self, t):
        return t

    @TOKEN(_alternatives("NOT"))
    def t_NOT(self, t):
        return t

    @TOKEN(_alternatives("AND"))
    def t_AND(self, t):
        return t

    @TOKEN(_alternatives("OR"))
    def t_OR(self, t):
        return t

    @TOKEN(_alternatives("TOP"))
    def t_TOP(self, t):
        return t

    @TOKEN(_alternatives("BOT"))
    def t_BOT(self, t):
        return t

    @TOKEN(_alternatives("FORALL"))
    def t_FORALL(self, t):
        return t

    @TOKEN(_alternatives("EXISTS"))
    def t_EXISTS(self, t):
        return t

    @TOKEN(_alternatives("DOT"))
    def t_DOT(self, t):
        return t

    @TOKEN(_alternatives("COMMA"))
    def t_COMMA(self, t):
        return t

    @TOKEN(_alternatives("UNDERSCORE"))
    def t_UNDERSCORE(self, t):
        return t

    # Names and alphabetic keywords.  Only exact keyword spellings are
    # remapped: "T" is TOP, "T1" is an atom.
    @TOKEN(_WORD_PATTERN + r"|[a-zA-Z][0-9]*")
    def t_ATOM(self, t):
        t.type = KEYWORDS.get(t.value, "ATOM")
        return t

    def t_error(self, t):
        """Handle invalid characters."""
        raise LexerError(t.lexer.lexdata, t.lexpos)

    def scanner(self, text: str) -> lex.Lexer:
        """Return an independent ply lexer primed with ``text``."""
        scanner = self._lexer.clone()
        scanner.input(text)
        return scanner

    def next_token(self, scanner: lex.Lexer) -> Optional[lex.LexToken]:
        """Pull the next token from ``scanner``, tracing it at DEBUG level."""
        tok = scanner.token()
        if tok is not None:
            self.logger.token(tok.type, tok.value, tok.lexpos)
        return tok

    def tokenize(self, text: str) -> Iterator[Token]:
        """
        Tokenize a formula string.

        Args:
            text: The formula string.

        Yields:
            Tokens in input order; whitespace and newlines are skipped.

        Raises:
            LexerError: At the first character no category matches.
        """
        scanner = self.scanner(text)
        while True:
            tok = self.next_token(scanner)
            if tok is None:
                return
            yield Token(tok.type, tok.value, tok.lexpos)
