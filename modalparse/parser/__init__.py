"""
Formula parser for modalparse.

Provides lexical analysis, parsing, and AST construction for modal and
epistemic logic formulas, including agent-indexed box/diamond operators,
first-order quantifiers and predicates.
"""
