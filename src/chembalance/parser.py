"""Formula and equation parsing.

Formulas are read by a small recursive-descent parser that owns its cursor:

    formula   := [coefficient] body [charge]
    body      := (element [count] | "(" body ")" [count] | hydrate)*
    hydrate   := ("·" | "*") [count] body
    charge    := ["^"] [digits] ("+" | "-")

An optional state annotation such as "(aq)" is removed from the end of the
text before the body is read. A digit run directly followed by a closing sign
at the end of the text is a charge magnitude, so "Fe3+" is one iron atom with
charge +3; write "NH4^+" when the digits belong to the last element.

Equations are split on the first arrow token and then on whitespace-padded
"+" so that ionic charges such as "Fe3+" are never taken as separators.
"""

from __future__ import annotations

import logging
import re
from typing import Container, Dict, Mapping, Optional, Tuple

from chembalance.constants import ARROW_TOKENS, HYDRATE_SEPARATORS, STATE_SYMBOLS
from chembalance.errors import (
    EmptySideError,
    MalformedFormulaError,
    NoArrowFoundError,
    UnknownElementError,
)
from chembalance.models import ArrowType, ParsedEquation, ParsedFormula

logger = logging.getLogger(__name__)

_STATE_PATTERN = re.compile(r"^(.+?)\s*\((%s)\)\s*$" % "|".join(STATE_SYMBOLS))
_CHARGE_PATTERN = re.compile(r"(\d*)([+-])")
_TRAILING_CHARGE_PATTERN = re.compile(r"\d+[+-]")
_TERM_SEPARATOR = re.compile(r"\s+\+\s+")


def _is_digit(char: str) -> bool:
    return char.isascii() and char.isdigit()


def _is_upper(char: str) -> bool:
    return char.isascii() and char.isupper()


def _is_lower(char: str) -> bool:
    return char.isascii() and char.islower()


def _merge(target: Dict[str, int], counts: Mapping[str, int], multiplier: int) -> None:
    for symbol, count in counts.items():
        target[symbol] = target.get(symbol, 0) + count * multiplier


def split_state(text: str) -> Tuple[str, Optional[str]]:
    """Separate a trailing "(s)", "(l)", "(g)" or "(aq)" annotation."""
    match = _STATE_PATTERN.match(text)
    if match:
        return match.group(1).strip(), match.group(2)
    return text.strip(), None


class FormulaParser:
    """Single-use parser for one formula token.

    Digits directly before a closing sign are read as the charge, so "NH4+"
    parses as one H with charge +4. Write "NH4^+" for ammonium.

    Args:
        text: The formula text, e.g. ``"CuSO4·5H2O"`` or ``"2Fe^3+(aq)"``.
        strict: Raise :class:`MalformedFormulaError` on leftover input, an
            unclosed group or an empty element map. When False, scanning stops
            silently at the first unrecognised character.
    """

    def __init__(self, text: str, strict: bool = True):
        self.original = text.strip()
        self.text, self.state = split_state(self.original)
        self.strict = strict
        self.position = 0

    def parse(self) -> ParsedFormula:
        coefficient = self._parse_coefficient()
        elements = self._parse_body()
        charge = self._parse_charge()

        if self.strict:
            if self.position < len(self.text):
                raise MalformedFormulaError(
                    self.original, self.text[self.position:], "unrecognised characters"
                )
            if not elements:
                raise MalformedFormulaError(
                    self.original, self.text, "no element symbols"
                )

        return ParsedFormula(
            elements=elements,
            coefficient=coefficient,
            charge=charge,
            state=self.state,
            original=self.original,
        )

    def _peek(self) -> str:
        if self.position < len(self.text):
            return self.text[self.position]
        return ""

    def _read_digits(self) -> str:
        start = self.position
        while _is_digit(self._peek()):
            self.position += 1
        return self.text[start:self.position]

    def _read_count(self) -> int:
        # Digits that run into the closing charge sign belong to the charge.
        if _TRAILING_CHARGE_PATTERN.fullmatch(self.text, self.position):
            return 1
        digits = self._read_digits()
        return int(digits) if digits else 1

    def _parse_coefficient(self) -> int:
        if not _is_digit(self._peek()):
            return 1
        start = self.position
        digits = self._read_digits()
        following = self._peek()
        if _is_upper(following) or following == "(":
            coefficient = int(digits)
            if coefficient == 0 and self.strict:
                raise MalformedFormulaError(self.original, digits, "zero coefficient")
            return coefficient
        self.position = start
        return 1

    def _parse_body(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        while self.position < len(self.text):
            char = self._peek()
            if char == "(":
                opened_at = self.position
                self.position += 1
                inner = self._parse_body()
                if self._peek() == ")":
                    self.position += 1
                elif self.strict:
                    raise MalformedFormulaError(
                        self.original, self.text[opened_at:], "unclosed '('"
                    )
                _merge(counts, inner, self._read_count())
            elif _is_upper(char):
                symbol = char
                self.position += 1
                if _is_lower(self._peek()):
                    symbol += self._peek()
                    self.position += 1
                count = self._read_count()
                counts[symbol] = counts.get(symbol, 0) + count
            elif char in HYDRATE_SEPARATORS:
                self.position += 1
                multiplier = self._read_count()
                _merge(counts, self._parse_body(), multiplier)
            else:
                # ")" closes the enclosing group; anything else ends the scan.
                break
        return counts

    def _parse_charge(self) -> Optional[int]:
        start = self.position
        if self._peek() == "^":
            self.position += 1
        match = _CHARGE_PATTERN.fullmatch(self.text, self.position)
        if match is None:
            self.position = start
            return None
        self.position = len(self.text)
        magnitude = int(match.group(1)) if match.group(1) else 1
        return magnitude if match.group(2) == "+" else -magnitude


def parse_formula(text: str, strict: bool = True) -> ParsedFormula:
    """Parse a formula token such as ``"Ca(OH)2"`` into a :class:`ParsedFormula`."""
    return FormulaParser(text, strict=strict).parse()


def _parse_side(text: str, strict: bool) -> Tuple[ParsedFormula, ...]:
    terms = (term.strip() for term in _TERM_SEPARATOR.split(text.strip()))
    return tuple(parse_formula(term, strict=strict) for term in terms if term)


def parse_equation(text: str, strict: bool = True) -> ParsedEquation:
    """Split a reaction on its arrow and parse every reactant and product.

    Raises:
        NoArrowFoundError: None of "<=>", "<->" or "->" occurs in the text.
        EmptySideError: One side of the arrow contains no compounds.
        MalformedFormulaError: A compound could not be parsed.
    """
    original = text.strip()
    for token in ARROW_TOKENS:
        index = original.find(token)
        if index >= 0:
            arrow_type = ArrowType(token)
            break
    else:
        raise NoArrowFoundError(original)

    reactants = _parse_side(original[:index], strict)
    if not reactants:
        raise EmptySideError(original, "reactants")
    products = _parse_side(original[index + len(token):], strict)
    if not products:
        raise EmptySideError(original, "products")

    logger.debug(
        "Parsed %d reactant(s) and %d product(s) around '%s' in '%s'",
        len(reactants),
        len(products),
        arrow_type.value,
        original,
    )
    return ParsedEquation(
        reactants=reactants,
        products=products,
        arrow_type=arrow_type,
        original=original,
    )


def require_known_elements(formula: ParsedFormula, known_symbols: Container[str]) -> None:
    """Raise :class:`UnknownElementError` for the first symbol without data."""
    for symbol in formula.elements:
        if symbol not in known_symbols:
            raise UnknownElementError(symbol, formula.original)
