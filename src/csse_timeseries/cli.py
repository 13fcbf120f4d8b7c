"""
Command line interface
"""

from __future__ import annotations

import argparse
import datetime as dt
import functools
import logging
from collections.abc import Sequence
from pathlib import Path

import requests
from attrs import evolve

from csse_timeseries.config import (
    DEFAULT_DAILY_REPORT_DATASETS,
    DEFAULT_TIME_SERIES_DATASETS,
    UPDATED_MARKER_FILENAME,
    ConversionConfig,
    load_conversion_config,
)
from csse_timeseries.constants import SOURCE_REPOSITORY_URL
from csse_timeseries.conversion import CONVERTERS
from csse_timeseries.exceptions import CsseTimeseriesError, InvalidOutputPathError
from csse_timeseries.sources import fetch_text

LOGGER = logging.getLogger(__name__)

BANNER: str = f"""Source is the current COVID-19 data posted by Johns Hopkins University
on GitHub at {SOURCE_REPOSITORY_URL}

Data are reorganised into .csv files suitable for analysis in spreadsheet
or other analytics tools.
"""
"""
Attribution printed at the start of every run
"""

DEFAULT_DATASETS = {
    "daily": DEFAULT_DAILY_REPORT_DATASETS,
    "time-series": DEFAULT_TIME_SERIES_DATASETS,
}
"""
Datasets written by each command if no configuration file is supplied
"""


def _positive_int(value: str) -> int:
    res = int(value)
    if res < 1:
        msg = f"must be at least 1, received {value!r}"
        raise argparse.ArgumentTypeError(msg)

    return res


def _iso_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        msg = f"expected an ISO 8601 date (YYYY-MM-DD), received {value!r}"
        raise argparse.ArgumentTypeError(msg) from exc


def get_parser() -> argparse.ArgumentParser:
    """
    Get the command line parser

    Returns
    -------
    :
        Command line parser
    """
    parser = argparse.ArgumentParser(
        prog="csse-timeseries",
        description=(
            "Convert the Johns Hopkins CSSE COVID-19 data "
            "into denormalised time series CSV files"
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more detail (repeat for debug output)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    for command, help_text in (
        ("daily", "Convert the daily reports"),
        ("time-series", "Convert the time series files"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument(
            "output",
            nargs="?",
            type=Path,
            help=(
                "Directory to write to (default filenames are used "
                "and the updated marker is written too) "
                "or, if only one dataset is written, the file to write to"
            ),
        )
        sub.add_argument(
            "--updated",
            type=Path,
            help="Path (or directory) of the updated marker file",
        )
        sub.add_argument(
            "--source",
            help="URL or directory to read the sources from",
        )
        sub.add_argument(
            "--config",
            type=Path,
            help="JSON file which configures the conversion",
        )
        sub.add_argument(
            "--max-days",
            type=_positive_int,
            help="Maximum number of daily reports to read",
        )
        sub.add_argument(
            "--epoch",
            type=_iso_date,
            help="Date of the first daily report (YYYY-MM-DD)",
        )

    return parser


def resolve_updated_path(updated: Path) -> Path:
    """
    Resolve the path of the updated marker file

    Parameters
    ----------
    updated
        Directory or file path supplied by the user

    Returns
    -------
    :
        Path to write the marker to

    Raises
    ------
    InvalidOutputPathError
        `updated` is neither a directory nor a file in an existing directory
    """
    updated = updated.absolute()
    if updated.is_dir():
        return updated / UPDATED_MARKER_FILENAME

    if not updated.parent.is_dir():
        raise InvalidOutputPathError(updated, reason="parent directory does not exist")

    return updated


def apply_output_arguments(
    config: ConversionConfig, output: Path | None, updated: Path | None
) -> ConversionConfig:
    """
    Apply the output arguments to a configuration

    Parameters
    ----------
    config
        Configuration to start from

    output
        Directory or file path supplied by the user.
        If a directory is supplied, the updated marker is also written there
        unless `updated` says otherwise.

    updated
        Path (or directory) of the updated marker file supplied by the user

    Returns
    -------
    :
        Configuration with the output arguments applied

    Raises
    ------
    InvalidOutputPathError
        The output arguments can't be used
    """
    changes = {}
    if output is not None:
        output = output.absolute()
        if output.is_dir():
            changes["output_dir"] = output
            changes["updated_path"] = output / UPDATED_MARKER_FILENAME

        elif not output.parent.is_dir():
            raise InvalidOutputPathError(
                output, reason="parent directory does not exist"
            )

        elif len(config.datasets) != 1:
            raise InvalidOutputPathError(
                output,
                reason=(
                    f"{len(config.datasets)} datasets are written, "
                    "so a directory must be supplied"
                ),
            )

        else:
            changes["output_dir"] = output.parent
            changes["datasets"] = (evolve(config.datasets[0], filename=output.name),)

    if updated is not None:
        changes["updated_path"] = resolve_updated_path(updated)

    return evolve(config, **changes)


def build_config(args: argparse.Namespace) -> ConversionConfig:
    """
    Build the configuration of a conversion from parsed arguments

    Parameters
    ----------
    args
        Parsed command line arguments

    Returns
    -------
    :
        Configuration of the conversion
    """
    overrides = {
        "source": args.source,
        "epoch": args.epoch,
        "max_days": args.max_days,
    }
    if args.config is not None:
        config = load_conversion_config(args.config, **overrides)
    else:
        config = ConversionConfig(
            datasets=DEFAULT_DATASETS[args.command],
            **{k: v for k, v in overrides.items() if v is not None},
        )

    return apply_output_arguments(config, output=args.output, updated=args.updated)


def setup_logging(verbosity: int) -> None:
    """
    Set up logging to the terminal

    Parameters
    ----------
    verbosity
        Number of times the verbose flag was given
    """
    level = logging.INFO if verbosity < 1 else logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # urllib3 connection logging only with -vv
    if verbosity < 2:  # noqa: PLR2004
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the command line interface

    Parameters
    ----------
    argv
        Arguments to parse. If `None`, the process's arguments are used.

    Returns
    -------
    :
        Exit code
    """
    args = get_parser().parse_args(argv)
    setup_logging(args.verbose)

    print(BANNER)

    try:
        config = build_config(args)
    except (CsseTimeseriesError, OSError, ValueError) as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1

    try:
        convert = CONVERTERS[args.command]
        with requests.Session() as session:
            fetch = functools.partial(
                fetch_text, session=session, timeout=config.timeout
            )
            result = convert(config, fetch)

    except (CsseTimeseriesError, requests.RequestException, OSError) as exc:
        LOGGER.error("Conversion failed: %s", exc)
        return 1

    for path, n_rows in result.written.items():
        LOGGER.info("Wrote %d rows to %s", n_rows, path)

    if result.latest_date is None:
        LOGGER.warning("No data was found")
    else:
        LOGGER.info("Data runs up to %s", result.latest_date)

    print("Done.")

    return 0
