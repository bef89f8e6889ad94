from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd
import typer

from flexlayout import constants
from flexlayout.distributor import distribute_detailed, feasibility_report
from flexlayout.frames import frame_from_allocation
from flexlayout.types import Allocation, Infeasible
from flexlayout.utilities import LayoutFileError, load_layout, setup_logger
from flexlayout.validation import InvalidSpecError

LOGGER = logging.getLogger(__name__)

EXIT_LAYOUT_ERROR = 1
EXIT_INVALID_SPEC = 2
EXIT_INFEASIBLE = 3


app = typer.Typer(
    help='Distribute a total size across named flex regions.',
    no_args_is_help=True,
)


def _load(layout: Path, total: float | None) -> tuple[float, dict[str, Any]]:
    """Return the total and raw groups for ``layout``, exiting on failure."""

    try:
        file_total, groups = load_layout(layout)
    except LayoutFileError as exc:
        typer.secho(str(exc), err=True, fg=typer.colors.RED)
        raise typer.Exit(EXIT_LAYOUT_ERROR)
    except InvalidSpecError as exc:
        typer.secho(f'Invalid layout: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(EXIT_INVALID_SPEC)

    resolved = total if total is not None else file_total
    if resolved is None:
        typer.secho(
            'No total size given; pass --total or set "total" in the layout file.',
            err=True,
            fg=typer.colors.RED,
        )
        raise typer.Exit(EXIT_INVALID_SPEC)
    return resolved, groups


def _format_size(value: float) -> str:
    return f'{value:.6g}'


def _echo_totals(result: Allocation) -> None:
    width = max((len(key) for key in result.totals), default=0)
    for key, size in result.totals.items():
        members = result.members[key]
        line = f'{key.ljust(width)}  {_format_size(size)}'
        if len(members) > 1:
            line += '  (' + ', '.join(_format_size(member) for member in members) + ')'
        typer.echo(line)


def _report_infeasible(infeasible: Infeasible) -> None:
    typer.secho(f'Infeasible layout: {infeasible.describe()}', err=True, fg=typer.colors.RED)


@app.command()
def distribute(
    layout: Path = typer.Argument(..., help='Layout file (.toml, .json or .csv).'),
    total: float | None = typer.Option(
        None,
        '--total',
        '-t',
        help='Total size to distribute (overrides "total" in the layout file).',
    ),
    strategy: str = typer.Option(
        constants.STRATEGY_ITERATIVE,
        '--strategy',
        help='Tier filling strategy: "iterative" or "exact".',
    ),
    tolerance: float | None = typer.Option(
        None,
        '--tolerance',
        help='Absolute numeric tolerance (defaults to one scaled to the total).',
    ),
    detail: bool = typer.Option(False, '--detail', help='Print one row per region.'),
    out: Path | None = typer.Option(
        None,
        '--out',
        '-o',
        help='Write the per-region allocation table to this CSV file.',
    ),
    debug: bool = typer.Option(False, '--debug', help='Enable debug logging.'),
) -> None:
    """Compute region sizes for LAYOUT and print them."""

    setup_logger(debug=debug)
    total_size, groups = _load(layout, total)

    try:
        result = distribute_detailed(total_size, groups, tolerance=tolerance, strategy=strategy)
    except InvalidSpecError as exc:
        typer.secho(f'Invalid layout: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(EXIT_INVALID_SPEC)

    if isinstance(result, Infeasible):
        _report_infeasible(result)
        raise typer.Exit(EXIT_INFEASIBLE)

    frame: pd.DataFrame | None = None
    if detail or out is not None:
        frame = frame_from_allocation(groups, result)

    if detail and frame is not None:
        typer.echo(frame.to_string(index=False))
    else:
        _echo_totals(result)

    if result.leftover > 0:
        LOGGER.info('Undistributed leftover: %s', result.leftover)

    if out is not None and frame is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(out, index=False)
        typer.secho(f'Saved allocation table to {out.resolve()}', fg=typer.colors.GREEN)


@app.command()
def check(
    layout: Path = typer.Argument(..., help='Layout file (.toml, .json or .csv).'),
    total: float | None = typer.Option(
        None,
        '--total',
        '-t',
        help='Total size to check (overrides "total" in the layout file).',
    ),
    debug: bool = typer.Option(False, '--debug', help='Enable debug logging.'),
) -> None:
    """Report whether LAYOUT can be sized to the total."""

    setup_logger(debug=debug)
    total_size, groups = _load(layout, total)

    try:
        total_min, total_max, infeasible = feasibility_report(total_size, groups)
    except InvalidSpecError as exc:
        typer.secho(f'Invalid layout: {exc}', err=True, fg=typer.colors.RED)
        raise typer.Exit(EXIT_INVALID_SPEC)

    typer.echo(f'total={_format_size(total_size)} min={_format_size(total_min)} max={_format_size(total_max)}')
    if infeasible is not None:
        _report_infeasible(infeasible)
        raise typer.Exit(EXIT_INFEASIBLE)
    typer.secho('Layout is feasible.', fg=typer.colors.GREEN)


def main() -> None:
    app()


if __name__ == '__main__':  # pragma: no cover - CLI entry point
    main()
