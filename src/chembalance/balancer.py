"""Equation balancing by null-space computation.

The composition matrix ``A`` (reactants positive, products negative) is
brought to reduced row-echelon form with partial pivoting. The first free
column is fixed to 1 and every pivot variable is read off its row, giving a
vector ``x`` with ``A @ x == 0``. That vector is then scaled to the smallest
positive integers.

Known limitations:
- Only the first free column is resolved. Reactions with more than one
  independent balance (e.g. ``H2 + O2 -> H2O + H2O2``) leave the other free
  compounds at zero and are rejected as unbalanceable.
- A solution with mixed signs is made positive by taking absolute values.
  This matches physically valid reactions but is not a general rule.
"""

from __future__ import annotations

import logging
import math
from fractions import Fraction
from functools import reduce
from typing import List, Sequence, Tuple

import numpy as np

from chembalance.constants import COEFFICIENT_PRECISION, PIVOT_TOLERANCE
from chembalance.errors import NoSolutionError, UnbalanceableError
from chembalance.matrix import build_matrix
from chembalance.models import ParsedEquation
from chembalance.parser import parse_equation

logger = logging.getLogger(__name__)


def row_reduce(
    matrix: np.ndarray, tolerance: float = PIVOT_TOLERANCE
) -> Tuple[np.ndarray, List[int]]:
    """Reduce a matrix to reduced row-echelon form.

    Args:
        matrix: Array of shape (rows, cols). It is copied, not modified.
        tolerance: Magnitudes below this are treated as zero.

    Returns:
        The reduced float array and the pivot column indices in discovery order.
        Pivot ``k`` sits in row ``k``.
    """
    reduced = np.array(matrix, dtype=float)
    n_rows, n_cols = reduced.shape
    pivot_columns: List[int] = []
    pivot_row = 0

    for col in range(n_cols):
        if pivot_row >= n_rows:
            break

        max_row = pivot_row + int(np.argmax(np.abs(reduced[pivot_row:, col])))
        if abs(reduced[max_row, col]) < tolerance:
            continue

        if max_row != pivot_row:
            reduced[[pivot_row, max_row]] = reduced[[max_row, pivot_row]]
        reduced[pivot_row] /= reduced[pivot_row, col]

        for row in range(n_rows):
            if row == pivot_row:
                continue
            factor = reduced[row, col]
            if abs(factor) < tolerance:
                continue
            reduced[row] -= factor * reduced[pivot_row]

        pivot_columns.append(col)
        pivot_row += 1

    return reduced, pivot_columns


def null_space_vector(
    reduced: np.ndarray, pivot_columns: Sequence[int], n_compounds: int
) -> np.ndarray:
    """Solve a reduced system with the first free column fixed to 1.

    Every pivot variable is read off its row; any further free columns stay 0.

    Raises:
        ValueError: Every column is a pivot column.
    """
    free_columns = [col for col in range(n_compounds) if col not in pivot_columns]
    if not free_columns:
        raise ValueError("no free column")

    free_col = free_columns[0]
    solution = np.zeros(n_compounds)
    solution[free_col] = 1.0
    for row, col in enumerate(pivot_columns):
        solution[col] = -reduced[row, free_col]
    return solution


def normalize_coefficients(
    vector: Sequence[float], tolerance: float = PIVOT_TOLERANCE
) -> List[int]:
    """Turn a rational null-space vector into the smallest integer multiple.

    Each entry is recovered as a fraction with denominator at most
    ``COEFFICIENT_PRECISION``. An all non-positive vector is negated; a
    mixed-sign vector has every entry replaced by its absolute value.
    """
    values = np.asarray(vector, dtype=float)
    has_negative = bool(np.any(values < -tolerance))
    has_positive = bool(np.any(values > tolerance))
    if has_negative and has_positive:
        logger.debug("Mixed-sign solution %s; taking absolute values", values)
        values = np.abs(values)
    elif has_negative:
        values = -values

    ratios = [
        Fraction(float(v)).limit_denominator(COEFFICIENT_PRECISION) for v in values
    ]
    multiple = reduce(math.lcm, (r.denominator for r in ratios), 1)
    scaled = [int(r * multiple) for r in ratios]
    divisor = reduce(math.gcd, (abs(v) for v in scaled if v), 0) or 1
    return [v // divisor for v in scaled]


def balance(equation: ParsedEquation) -> List[int]:
    """Compute minimal positive integer coefficients for a parsed equation.

    Returns:
        One coefficient per compound, reactants first then products.

    Raises:
        NoSolutionError: The equation has no element data to reduce.
        UnbalanceableError: Only the trivial solution exists, or the resolved
            solution is not strictly positive.
    """
    composition = build_matrix(equation)
    n_elements, n_compounds = composition.shape
    if n_elements == 0 or n_compounds == 0:
        raise NoSolutionError(equation.original, "no elements to balance")

    reduced, pivot_columns = row_reduce(composition.values)
    free_columns = [col for col in range(n_compounds) if col not in pivot_columns]
    logger.debug(
        "Pivot columns %s, free columns %s for '%s'",
        pivot_columns,
        free_columns,
        equation.original,
    )
    if not free_columns:
        raise UnbalanceableError(equation.original, "no free variables")
    if len(free_columns) > 1:
        logger.warning(
            "'%s' has %d independent balances; resolving column %d only",
            equation.original,
            len(free_columns),
            free_columns[0],
        )

    solution = null_space_vector(reduced, pivot_columns, n_compounds)
    coefficients = normalize_coefficients(solution)
    if any(c <= 0 for c in coefficients):
        raise UnbalanceableError(
            equation.original, f"no strictly positive solution, got {coefficients}"
        )
    return coefficients


def balance_equation(text: str, strict: bool = True) -> List[int]:
    """Parse and balance a reaction string, e.g. ``"H2 + O2 -> H2O"``."""
    return balance(parse_equation(text, strict=strict))


def is_balanced(equation: ParsedEquation, coefficients: Sequence[int]) -> bool:
    """Check atom conservation exactly, in integer arithmetic."""
    composition = build_matrix(equation)
    if len(coefficients) != composition.shape[1]:
        return False
    totals = composition.values @ np.asarray(coefficients, dtype=np.int64)
    return bool(np.all(totals == 0))


def format_balanced_equation(equation: ParsedEquation, coefficients: Sequence[int]) -> str:
    """Render ``"2H2 + O2 -> 2H2O"``; a coefficient of 1 is omitted.

    Any coefficient already written before a compound is replaced, not
    prefixed, so ``"2H2 + O2 -> 2H2O"`` renders the same way.
    """
    terms = [
        (str(c) if c != 1 else "") + compound.body
        for c, compound in zip(coefficients, equation.compounds)
    ]
    n_reactants = len(equation.reactants)
    return "{} {} {}".format(
        " + ".join(terms[:n_reactants]),
        equation.arrow_type.value,
        " + ".join(terms[n_reactants:]),
    )
