"""chembalance core package."""

from chembalance.balancer import balance, balance_equation, format_balanced_equation
from chembalance.errors import (
    ChemistryError,
    EmptySideError,
    MalformedFormulaError,
    NoArrowFoundError,
    NoSolutionError,
    UnbalanceableError,
    UnknownElementError,
)
from chembalance.matrix import CompositionMatrix, build_matrix
from chembalance.models import ArrowType, ParsedEquation, ParsedFormula
from chembalance.parser import parse_equation, parse_formula

__all__ = [
    "balance",
    "balance_equation",
    "format_balanced_equation",
    "ChemistryError",
    "EmptySideError",
    "MalformedFormulaError",
    "NoArrowFoundError",
    "NoSolutionError",
    "UnbalanceableError",
    "UnknownElementError",
    "CompositionMatrix",
    "build_matrix",
    "ArrowType",
    "ParsedEquation",
    "ParsedFormula",
    "parse_equation",
    "parse_formula",
]
