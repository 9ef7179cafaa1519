"""
CLI entry point using Typer.

Provides commands:
- score: Hanley fatigue score of prescriptions
- reverse: Total reps for a Hanley zone, with set divisions
- frederick: Frederick metabolic load, with RPE drift
- peak-force: Peak-force drop-off table
- tonnage / 1rm: Plain load arithmetic
- recommend: Session recommendation from config, history and context
"""

from .app import app
from .commands import calculators, recommend  # noqa: F401  (registers commands)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
