"""Exceptions raised while parsing and balancing."""

from __future__ import annotations


class ChemistryError(ValueError):
    """Base class for input that cannot be parsed or balanced."""

    kind = "ChemistryError"


class MalformedFormulaError(ChemistryError):
    kind = "MalformedFormula"

    def __init__(self, text: str, fragment: str, reason: str = "unexpected input"):
        self.text = text
        self.fragment = fragment
        self.reason = reason
        super().__init__(f"Malformed formula '{text}': {reason} at '{fragment}'")


class NoArrowFoundError(ChemistryError):
    kind = "NoArrowFound"

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"No reaction arrow found in '{text}'. Use ->, <->, or <=>")


class EmptySideError(ChemistryError):
    kind = "EmptySide"

    def __init__(self, text: str, side: str):
        self.text = text
        self.side = side
        super().__init__(f"Equation '{text}' has no {side}")


class UnknownElementError(ChemistryError):
    kind = "UnknownElement"

    def __init__(self, symbol: str, formula: str):
        self.symbol = symbol
        self.formula = formula
        super().__init__(f"Unknown element '{symbol}' in '{formula}'")


class UnbalanceableError(ChemistryError):
    kind = "Unbalanceable"

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Equation '{text}' cannot be balanced ({reason})")


class NoSolutionError(ChemistryError):
    kind = "NoSolution"

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"No solution for '{text}': {reason}")
