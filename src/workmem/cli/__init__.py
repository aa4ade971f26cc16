"""CLI commands for the work_mem benchmark.

Provides command-line interface using Typer:
- workmem serve: Run the benchmark service
- workmem seed: Load the fixture tables into the store
- workmem compare: Time both work_mem regimes in-process

Usage:
    workmem --help
    workmem seed --reset
    workmem compare --iterations 20 --work-mem 64kB
    workmem serve --port 8082
"""

import typer

from workmem.cli.compare_cmd import app as compare_app
from workmem.cli.seed_cmd import app as seed_app
from workmem.cli.serve import app as serve_app

app = typer.Typer(
    name="workmem",
    help="workmem-bench: the same query under default and lowered work_mem",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(seed_app, name="seed")
app.add_typer(compare_app, name="compare")


@app.callback()
def callback() -> None:
    """workmem-bench: the same query under default and lowered work_mem."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
