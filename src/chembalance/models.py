"""Data structures for parsed formulas and equations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# Same rule the parser uses: digits count as a coefficient only before an
# element or "(".
_COEFFICIENT_PREFIX = re.compile(r"^\d+(?=[A-Z(])")


class ArrowType(str, Enum):
    SINGLE = "->"
    DOUBLE = "<=>"
    DOUBLE_ASCII = "<->"


@dataclass(frozen=True)
class ParsedFormula:
    """A single compound token decomposed into element counts.

    Attributes:
        elements: Read-only map of element symbol to atom count, in
            first-seen order. It is left out of the hash.
        coefficient: Leading multiplier written before the formula (default 1).
        charge: Signed ionic charge, or None when no charge suffix was written.
        state: Physical state annotation ("s", "l", "g", "aq") if present.
        original: The raw (trimmed) input text.
    """

    elements: Mapping[str, int] = field(hash=False)
    coefficient: int = 1
    charge: Optional[int] = None
    state: Optional[str] = None
    original: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", MappingProxyType(dict(self.elements)))

    @property
    def body(self) -> str:
        """The original text without its leading coefficient."""
        return _COEFFICIENT_PREFIX.sub("", self.original, count=1)


@dataclass(frozen=True)
class ParsedEquation:
    reactants: Tuple[ParsedFormula, ...]
    products: Tuple[ParsedFormula, ...]
    arrow_type: ArrowType = ArrowType.SINGLE
    original: str = ""

    @property
    def compounds(self) -> Tuple[ParsedFormula, ...]:
        """Reactants followed by products, the column order used for balancing."""
        return self.reactants + self.products

    @property
    def reversible(self) -> bool:
        return self.arrow_type is not ArrowType.SINGLE
