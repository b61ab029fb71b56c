"""Command-line entrypoints for chembalance."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Any, Dict, Optional

import typer

from chembalance.balancer import balance, format_balanced_equation
from chembalance.errors import ChemistryError
from chembalance.models import ParsedEquation, ParsedFormula
from chembalance.parser import parse_equation, parse_formula
from chembalance.settings import Settings, load_settings

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False)

ConfigOption = Annotated[
    Optional[Path], typer.Option("--config", help="Path to JSON settings file.")
]
LenientOption = Annotated[
    bool, typer.Option("--lenient", help="Stop silently at unrecognised characters.")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")]


def _formula_payload(formula: ParsedFormula) -> Dict[str, Any]:
    return {
        "original": formula.original,
        "elements": dict(formula.elements),
        "coefficient": formula.coefficient,
        "charge": formula.charge,
        "state": formula.state,
    }


def _equation_payload(equation: ParsedEquation) -> Dict[str, Any]:
    return {
        "original": equation.original,
        "arrow": equation.arrow_type.value,
        "reactants": [_formula_payload(f) for f in equation.reactants],
        "products": [_formula_payload(f) for f in equation.products],
    }


def _setup(config: Optional[Path], lenient: bool, verbose: bool) -> Settings:
    try:
        settings = load_settings(config)
    except (OSError, ValueError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2)
    logging.basicConfig(level=logging.DEBUG if verbose else settings.log_level)
    if lenient:
        settings = replace(settings, strict=False)
    return settings


def _fail(exc: ChemistryError) -> None:
    logger.debug("%s: %s", exc.kind, exc)
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command("parse-formula")
def parse_formula_command(
    formula: Annotated[
        str,
        typer.Argument(
            help="Formula, e.g. 'CuSO4·5H2O'. Use ^ before a charge that follows "
            "a subscript, e.g. 'NH4^+' ('NH4+' reads as charge +4)."
        ),
    ],
    config: ConfigOption = None,
    lenient: LenientOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Print the element composition of a formula as JSON."""
    settings = _setup(config, lenient, verbose)
    try:
        parsed = parse_formula(formula, strict=settings.strict)
    except ChemistryError as exc:
        _fail(exc)
    typer.echo(json.dumps(_formula_payload(parsed), indent=settings.indent, ensure_ascii=False))


@app.command("parse-equation")
def parse_equation_command(
    equation: Annotated[str, typer.Argument(help="Reaction, e.g. 'N2 + H2 <=> NH3'.")],
    config: ConfigOption = None,
    lenient: LenientOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Print the reactants and products of a reaction as JSON."""
    settings = _setup(config, lenient, verbose)
    try:
        parsed = parse_equation(equation, strict=settings.strict)
    except ChemistryError as exc:
        _fail(exc)
    typer.echo(json.dumps(_equation_payload(parsed), indent=settings.indent, ensure_ascii=False))


@app.command("balance")
def balance_command(
    equation: Annotated[str, typer.Argument(help="Reaction, e.g. 'H2 + O2 -> H2O'.")],
    config: ConfigOption = None,
    lenient: LenientOption = False,
    verbose: VerboseOption = False,
    output: Annotated[
        Optional[Path], typer.Option(help="Path to save output JSON.")
    ] = None,
) -> None:
    """Balance a reaction and print the coefficients as JSON."""
    settings = _setup(config, lenient, verbose)
    try:
        parsed = parse_equation(equation, strict=settings.strict)
        coefficients = balance(parsed)
    except ChemistryError as exc:
        _fail(exc)

    payload = {
        "original": parsed.original,
        "compounds": [c.original for c in parsed.compounds],
        "coefficients": coefficients,
        "balanced": format_balanced_equation(parsed, coefficients),
    }
    json_output = json.dumps(payload, indent=settings.indent, ensure_ascii=False)
    typer.echo(json_output)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(json_output)


def main() -> None:
    app()
