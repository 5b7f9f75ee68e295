"""
modalparse: parser for modal and epistemic logic formulas.

Turns formulas with propositional connectives, agent-indexed
necessity/possibility operators, quantifiers and predicates into
immutable abstract syntax trees for downstream evaluators and
model checkers.
"""

__version__ = "0.1.0"
