"""
Parser for modal/epistemic logic formulas.

Implements a stratified grammar with fixed precedence and associativity
to parse formula strings into an abstract syntax tree (AST).

Precedence (lowest to highest):
    1. <->  (biconditional, non-associative)
    2. ->   (implication, right-to-left)
    3. |    (disjunction, left-to-right)
    4. &    (conjunction, left-to-right)
    5. !    (negation, right-to-left)
    6. [] <> []_a <>_a   (modal, right-to-left)
    7. A x . phi  (wide scope)   /   A x phi  (narrow scope)
    8. P(x, y, ...)
    9. atoms, constants, parenthesized formulas
"""

from __future__ import annotations

import copy
from typing import FrozenSet, List, Optional

import ply.lex as lex
import ply.yacc as yacc

from modalparse.parser.ast_nodes import (
    AGENTS,
    Atom,
    Biconditional,
    Box,
    Conjunction,
    Constant,
    Diamond,
    Disjunction,
    Exists,
    Forall,
    Formula,
    Implication,
    Negation,
    Predicate,
)
from modalparse.parser.lexer import FormulaLexer, LexerError, locate
from modalparse.utils.logger import LogLevel, ParserLogger


DEFAULT_MAX_DEPTH = 256


class ParseError(Exception):
    """
    Exception raised for parsing errors.

    Attributes:
        offset: Character offset at which parsing failed.
        expected: Token kinds that would have continued the parse
            (``"$end"`` stands for end of input).
        token: Literal text of the offending token, or None at end of input.
        line: 1-based line number.
        column: 1-based column number.
    """

    def __init__(
        self,
        text: str,
        offset: int,
        expected: FrozenSet[str] = frozenset(),
        token: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        self.offset = offset
        self.expected = frozenset(expected)
        self.token = token
        self.line, self.column = locate(text, offset)
        if message is None:
            found = f"'{token}'" if token is not None else "end of formula"
            message = f"Syntax error at {found}"
        detail = f"{message} (index {offset}, line {self.line}, column {self.column})"
        if self.expected:
            detail += f"; expected one of: {', '.join(sorted(self.expected))}"
        super().__init__(detail)


class NestingDepthError(ParseError):
    """Raised when a formula nests deeper than the parser's ``max_depth``."""


class GrammarError(Exception):
    """Raised when the generated parse table is not deterministic."""


class _Unexpected(Exception):
    """Carries the offending token out of the ply error hook."""

    def __init__(self, token: Optional[lex.LexToken]) -> None:
        super().__init__(token)
        self.token = token


class _TableLog:
    """Collects table-construction diagnostics emitted by ply.yacc."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def _record(self, msg: str, *args: object, **kwargs: object) -> None:
        self.messages.append(msg % args if args else msg)

    debug = info = warning = error = critical = _record


class _FormulaGrammar:
    """
    Grammar rules for modal/epistemic formulas.

    The dotted quantifier ends in a full ``formula``, so the grammar on its
    own admits two readings of ``A x. p & q``.  Every unit production is
    tagged with the lowest precedence (SCOPE), which makes each such
    shift/reduce choice a shift: operands extend as far as they can and the
    dotted quantifier takes the widest scope.
    """

    tokens = FormulaLexer.tokens

    precedence = (
        ("nonassoc", "SCOPE"),
        ("nonassoc", "IFF"),
        ("right", "IMPLIES"),
        ("left", "OR"),
        ("left", "AND"),
    )

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth

    def _checked(self, node: Formula, p: yacc.YaccProduction, index: int) -> Formula:
        # index is the position of the operator token in the production.
        if node.nesting > self.max_depth:
            raise NestingDepthError(
                p.lexer.lexdata,
                p.lexpos(index),
                token=p[index],
                message=f"Formula nesting exceeds maximum depth {self.max_depth}",
            )
        return node

    # --- Binary connectives ---

    def p_formula(self, p):
        """formula : iff"""
        p[0] = p[1]

    def p_iff(self, p):
        """iff : implies IFF implies"""
        p[0] = self._checked(Biconditional(p[1], p[3]), p, 2)

    def p_iff_implies(self, p):
        """iff : implies %prec SCOPE"""
        p[0] = p[1]

    def p_implies(self, p):
        """implies : or IMPLIES implies"""
        p[0] = self._checked(Implication(p[1], p[3]), p, 2)

    def p_implies_or(self, p):
        """implies : or %prec SCOPE"""
        p[0] = p[1]

    def p_or(self, p):
        """or : or OR and"""
        p[0] = self._checked(Disjunction(p[1], p[3]), p, 2)

    def p_or_and(self, p):
        """or : and %prec SCOPE"""
        p[0] = p[1]

    def p_and(self, p):
        """and : and AND unary"""
        p[0] = self._checked(Conjunction(p[1], p[3]), p, 2)

    def p_and_unary(self, p):
        """and : unary"""
        p[0] = p[1]

    # --- Negation ---

    def p_unary_not(self, p):
        """unary : NOT unary"""
        p[0] = self._checked(Negation(p[2]), p, 1)

    def p_unary_modal(self, p):
        """unary : modal"""
        p[0] = p[1]

    # --- Modal operators ---

    def p_modal_box(self, p):
        """modal : BOX modal"""
        p[0] = self._checked(Box(p[2]), p, 1)

    def p_modal_diamond(self, p):
        """modal : DIAMOND modal"""
        p[0] = self._checked(Diamond(p[2]), p, 1)

    def p_modal_box_agent(self, p):
        """modal : BOX UNDERSCORE agent modal"""
        p[0] = self._checked(Box(p[4], agent=p[3]), p, 1)

    def p_modal_diamond_agent(self, p):
        """modal : DIAMOND UNDERSCORE agent modal"""
        p[0] = self._checked(Diamond(p[4], agent=p[3]), p, 1)

    def p_modal_base(self, p):
        """modal : quantifier
                 | predicate
                 | atom"""
        p[0] = p[1]

    def p_agent(self, p):
        """agent : ATOM
                 | AGENT"""
        # A lone a..d lexes as ATOM; anything else is not an agent.
        if p[1] not in AGENTS:
            raise ParseError(
                p.lexer.lexdata,
                p.lexpos(1),
                expected=frozenset({"AGENT"}),
                token=p[1],
                message=f"Unknown agent '{p[1]}'",
            )
        p[0] = p[1]

    # --- Quantifiers ---

    def p_quantifier_forall_dotted(self, p):
        """quantifier : FORALL ATOM DOT formula"""
        p[0] = self._checked(Forall(p[2], p[4]), p, 1)

    def p_quantifier_exists_dotted(self, p):
        """quantifier : EXISTS ATOM DOT formula"""
        p[0] = self._checked(Exists(p[2], p[4]), p, 1)

    def p_quantifier_forall(self, p):
        """quantifier : FORALL ATOM modal"""
        p[0] = self._checked(Forall(p[2], p[3]), p, 1)

    def p_quantifier_exists(self, p):
        """quantifier : EXISTS ATOM modal"""
        p[0] = self._checked(Exists(p[2], p[3]), p, 1)

    # --- Predicates ---

    def p_predicate(self, p):
        """predicate : ATOM LPAREN args RPAREN"""
        p[0] = Predicate(p[1], p[3])

    def p_args_first(self, p):
        """args : ATOM"""
        p[0] = [p[1]]

    def p_args_more(self, p):
        """args : args COMMA ATOM"""
        p[1].append(p[3])
        p[0] = p[1]

    # --- Atomic formulas ---

    def p_atom_name(self, p):
        """atom : ATOM"""
        p[0] = Atom(p[1])

    def p_atom_top(self, p):
        """atom : TOP"""
        p[0] = Constant(True)

    def p_atom_bot(self, p):
        """atom : BOT"""
        p[0] = Constant(False)

    # --- Parentheses ---

    def p_atom_group(self, p):
        """atom : LPAREN formula RPAREN"""
        p[0] = p[2]

    def p_error(self, token):
        raise _Unexpected(token)


class FormulaParser:
    """
    Parser for modal/epistemic formulas.

    Wraps the ply-generated LALR parser with a clean public interface.
    The parse table is built once per instance; every call to ``parse``
    works on its own copy of the lexer and of the parser automaton, so an
    instance can be shared between threads.

    Attributes:
        max_depth: Maximum formula nesting accepted (see ``Formula.nesting``).
        logger: Logger for token traces and parse results.
    """

    _TERMINALS = frozenset(FormulaLexer.tokens) | {"$end"}

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        logger: Optional[ParserLogger] = None,
    ) -> None:
        """
        Initialize the parser and build its parse table.

        Args:
            max_depth: Maximum formula nesting accepted (default: 256).
            logger: Optional logger for debug output.

        Raises:
            ValueError: If ``max_depth`` is not a positive integer.
            GrammarError: If the parse table has unresolved conflicts.
        """
        if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth < 1:
            raise ValueError(f"max_depth must be a positive integer, got {max_depth!r}")
        self.max_depth: int = max_depth
        self.logger: ParserLogger = logger or ParserLogger(LogLevel.SILENT)
        self._lexer = FormulaLexer(logger=self.logger)

        table_log = _TableLog()
        self._automaton = yacc.yacc(
            module=_FormulaGrammar(max_depth),
            start="formula",
            debug=True,
            debuglog=yacc.NullLogger(),
            write_tables=False,
            errorlog=table_log,
        )
        conflicts = [m for m in table_log.messages if "conflict" in m]
        if conflicts:
            raise GrammarError("; ".join(conflicts))
        for message in table_log.messages:
            self.logger.debug(f"yacc: {message}")

    def parse(self, text: str) -> Formula:
        """
        Parse a formula string into an AST.

        Args:
            text: The formula string to parse.

        Returns:
            The root Formula node of the AST.

        Raises:
            LexerError: If the formula contains an invalid character.
            ParseError: If the formula is syntactically invalid.
        """
        self.logger.debug(f"Parsing {text!r}")
        scanner = self._lexer.scanner(text)
        automaton = copy.copy(self._automaton)
        # State stack as it was when the current lookahead was read.
        before: List[int] = []

        def next_token() -> Optional[lex.LexToken]:
            before[:] = automaton.statestack
            return self._lexer.next_token(scanner)

        try:
            result = automaton.parse(lexer=scanner, tokenfunc=next_token)
        except _Unexpected as exc:
            error = self._unexpected(text, exc.token, automaton, before)
            self.logger.error(str(error))
            raise error from None
        except (LexerError, ParseError) as exc:
            self.logger.error(str(exc))
            raise

        self.logger.parsed(text, result)
        return result

    @classmethod
    def _unexpected(
        cls,
        text: str,
        token: Optional[lex.LexToken],
        automaton: yacc.LRParser,
        stack: List[int],
    ) -> ParseError:
        """Build the error for a token no parse action accepts."""
        expected = frozenset(
            kind for kind in cls._TERMINALS if cls._shifts(automaton, stack, kind)
        )
        if token is None:
            return ParseError(text, len(text), expected)
        return ParseError(text, token.lexpos, expected, token=token.value)

    @staticmethod
    def _shifts(automaton: yacc.LRParser, stack: List[int], kind: str) -> bool:
        """
        Return True if ``kind`` would be shifted (or accepted) from ``stack``.

        Runs the reductions the table prescribes for ``kind`` on a copy of
        the stack.  LALR lookaheads are merged across contexts, so a
        reduction alone does not prove the token can continue the parse.
        """
        stack = list(stack)
        while True:
            action = automaton.action[stack[-1]].get(kind)
            if action is None:
                return False
            if action >= 0:
                return True
            production = automaton.productions[-action]
            if production.len:
                del stack[-production.len:]
            state = automaton.goto[stack[-1]].get(production.name)
            if state is None:
                return False
            stack.append(state)
