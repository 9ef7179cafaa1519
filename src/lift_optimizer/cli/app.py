"""Shared Typer app object and shared option types."""

import logging
from typing import Annotated

import typer

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="lift-optimizer",
    help="Volume/fatigue calculators and session recommendations for strength training.",
    no_args_is_help=True,
    invoke_without_command=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log engine decisions to stderr"),
    ] = False,
) -> None:
    """
    Hanley / Frederick fatigue calculators and the session optimizer.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )
