"""Element-by-compound composition matrix."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from chembalance.models import ParsedEquation


@dataclass(frozen=True)
class CompositionMatrix:
    """Composition matrix of a reaction.

    Attributes:
        values: Integer array of shape (elements, compounds). Reactant columns
            hold positive counts, product columns negative counts, so a
            balanced coefficient vector ``x`` satisfies ``values @ x == 0``.
        elements: Row labels in first-seen order.
        compounds: Column labels (original compound text), reactants first.
    """

    values: np.ndarray
    elements: Tuple[str, ...]
    compounds: Tuple[str, ...]

    @property
    def shape(self) -> Tuple[int, int]:
        return (len(self.elements), len(self.compounds))


def build_matrix(equation: ParsedEquation) -> CompositionMatrix:
    compounds = equation.compounds
    n_reactants = len(equation.reactants)

    elements: list[str] = []
    for compound in compounds:
        for symbol in compound.elements:
            if symbol not in elements:
                elements.append(symbol)
    row_index = {symbol: row for row, symbol in enumerate(elements)}

    values = np.zeros((len(elements), len(compounds)), dtype=np.int64)
    for col, compound in enumerate(compounds):
        sign = 1 if col < n_reactants else -1
        for symbol, count in compound.elements.items():
            values[row_index[symbol], col] = sign * count

    return CompositionMatrix(
        values=values,
        elements=tuple(elements),
        compounds=tuple(compound.original for compound in compounds),
    )
