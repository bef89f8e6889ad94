"""Layout file loading and logging setup shared by the command line tools."""

# Import packages
from __future__ import annotations

import json
import logging
from logging import getLogger
from pathlib import Path
from typing import Any, Mapping

import pandas as pd

try:  # pragma: no cover - Python < 3.11 fallback
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - dependency fallback
    import tomli as tomllib  # type: ignore[import-not-found]

from flexlayout.frames import groups_from_frame

# Establish logger
logger = getLogger(__name__)

LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s :: %(message)s'
LOG_DATEFMT = '%d-%b-%y %H:%M:%S'


class LayoutFileError(ValueError):
    """Raised when a layout file cannot be read or has the wrong shape."""


def setup_logger(debug: bool = False, log_file: str | Path | None = None) -> None:
    """Configure the root logger for command line runs.

    Parameters
    ----------
    debug : bool
        Log at DEBUG instead of INFO.
    log_file : str | Path, optional
        Write records to this file instead of stderr.
    """
    loglevel = logging.DEBUG if debug else logging.INFO

    handler_kwargs: dict[str, Any] = {}
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler_kwargs = {'filename': str(log_path), 'encoding': 'utf-8', 'filemode': 'w'}

    logging.basicConfig(
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        level=loglevel,
        force=True,
        **handler_kwargs,
    )
    logging.getLogger('pandas').setLevel(logging.WARNING)


def _split_document(data: Mapping[str, Any], path: Path) -> tuple[float | None, dict[str, Any]]:
    total = data.get('total')
    if total is not None and (isinstance(total, bool) or not isinstance(total, (int, float))):
        raise LayoutFileError(f"'total' in {path} must be a number, got {total!r}")

    groups = data.get('groups')
    if groups is None:
        groups = {key: value for key, value in data.items() if key != 'total'}
    if not isinstance(groups, Mapping):
        raise LayoutFileError(f"'groups' in {path} must be a table of named regions")
    return (float(total) if total is not None else None), dict(groups)


def load_layout(path: str | Path) -> tuple[float | None, dict[str, Any]]:
    """Return ``(total, groups)`` read from a TOML, JSON or CSV layout file.

    TOML and JSON documents may carry a ``total`` number and a ``groups``
    table; without ``groups`` every other top-level key is a group. CSV files
    hold one row per region (see :func:`flexlayout.frames.groups_from_frame`)
    and never carry a total.
    """
    layout_path = Path(path)
    suffix = layout_path.suffix.lower()
    try:
        if suffix == '.toml':
            with layout_path.open('rb') as handle:
                data = tomllib.load(handle)
        elif suffix == '.json':
            data = json.loads(layout_path.read_text(encoding='utf-8'))
        elif suffix == '.csv':
            return None, dict(groups_from_frame(pd.read_csv(layout_path)))
        else:
            raise LayoutFileError(f'Unsupported layout file type: {layout_path.suffix or layout_path.name}')
    except (
        OSError,
        UnicodeDecodeError,
        tomllib.TOMLDecodeError,
        json.JSONDecodeError,
        pd.errors.ParserError,
        pd.errors.EmptyDataError,
    ) as exc:
        raise LayoutFileError(f'Unable to read layout {layout_path}: {exc}') from exc

    if not isinstance(data, Mapping):
        raise LayoutFileError(f'Layout {layout_path} must contain a table at the top level')
    logger.debug('Loaded layout from %s', layout_path)
    return _split_document(data, layout_path)


__all__ = ['LayoutFileError', 'setup_logger', 'load_layout']
