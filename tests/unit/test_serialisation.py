"""
Tests of `csse_timeseries.serialisation`
"""

import datetime as dt
import os
import stat
import sys

import pytest

from csse_timeseries.aggregation import AggregationStore
from csse_timeseries.derived import calculate_derived_metrics
from csse_timeseries.records import GeographicKey
from csse_timeseries.serialisation import (
    GRANULAR_COLUMNS,
    SIMPLE_COLUMNS,
    OutputSchema,
    date_from_index,
    format_updated_marker,
    get_output_columns,
    quote,
    render_csv,
    write_text_atomic,
)

EPOCH = dt.date(2020, 1, 22)


@pytest.mark.parametrize(
    "value, exp",
    (
        pytest.param("Italy", '"Italy"', id="plain"),
        pytest.param("Korea, South", '"Korea, South"', id="comma"),
        pytest.param('The "Bahamas"', '"The ""Bahamas"""', id="ends-with-quote"),
        pytest.param("", '""', id="empty"),
    ),
)
def test_quote(value, exp):
    assert quote(value) == exp


def render(store, schema, rolling_window=None, first_output_index=0):
    derived = calculate_derived_metrics(
        store.to_frame(),
        measures=schema.measures,
        second_order=schema.second_order,
        first_output_index=first_output_index,
        rolling_window=rolling_window,
    )

    return render_csv(derived, schema, epoch=EPOCH, rolling_window=rolling_window)


def test_render_simple():
    store = AggregationStore()
    us = GeographicKey("US", latitude="40.0", longitude="-75.0")
    store.add_observation(1, us, confirmed=9)
    store.add_observation(0, us, confirmed=5)

    res = render(store, OutputSchema.SIMPLE)

    assert res == (
        '"Date","ProvinceState","CountryRegion","Lat","Long",'
        '"Confirmed","Deaths","Recovered",'
        '"NewConfirmed","NewDeaths","NewRecovered"\n'
        '2020-01-22,"","US",40.0,-75.0,5,0,0,5,0,0\n'
        '2020-01-23,"","US",40.0,-75.0,9,0,0,4,0,0\n'
    )


def test_render_granular_order_and_quoting():
    store = AggregationStore()
    for date_index in range(3):
        store.add_observation(
            date_index, GeographicKey("US", "Illinois", "Cook"), confirmed=date_index
        )
        store.add_observation(
            date_index, GeographicKey("Korea, South"), confirmed=2 * date_index
        )

    res = render(store, OutputSchema.GRANULAR, first_output_index=2)

    lines = res.splitlines()
    assert lines[0] == ",".join(f'"{c}"' for c in GRANULAR_COLUMNS)
    assert lines[1:] == [
        '2020-01-24,"","","Korea, South",,,4,0,2,0,0,0',
        '2020-01-24,"Cook","Illinois","US",,,2,0,1,0,0,0',
    ]


def test_render_line_endings_and_no_bom():
    store = AggregationStore()
    store.add_observation(0, GeographicKey("Italy"), confirmed=1)

    res = render(store, OutputSchema.SIMPLE)

    assert "\r" not in res
    assert not res.startswith("\ufeff")
    assert res.endswith("\n")


def test_render_rolling_average():
    store = AggregationStore()
    store.add_observation(0, GeographicKey("Italy"), confirmed=1)
    store.add_observation(1, GeographicKey("Italy"), confirmed=3)

    res = render(store, OutputSchema.SIMPLE, rolling_window=2)

    header, first, second = res.splitlines()
    assert header.endswith('"AvgNewConfirmed2","AvgNewDeaths2","AvgNewRecovered2"')
    assert first.endswith(",1,0,0")
    assert second.endswith(",1.50,0,0")


def test_render_empty():
    res = render(AggregationStore(), OutputSchema.SIMPLE)

    assert res == ",".join(f'"{c}"' for c in SIMPLE_COLUMNS) + "\n"


def test_render_escapes_embedded_quotes():
    store = AggregationStore()
    store.add_observation(0, GeographicKey('Bahamas, The "Islands"'), confirmed=1)

    res = render(store, OutputSchema.SIMPLE)

    assert '"Bahamas, The ""Islands"""' in res.splitlines()[1]


@pytest.mark.parametrize(
    "schema, rolling_window, exp_n_columns",
    (
        (OutputSchema.SIMPLE, None, 11),
        (OutputSchema.SIMPLE, 7, 14),
        (OutputSchema.GRANULAR, None, 12),
        (OutputSchema.GRANULAR, 7, 14),
    ),
)
def test_get_output_columns(schema, rolling_window, exp_n_columns):
    res = get_output_columns(schema, rolling_window=rolling_window)

    assert len(res) == exp_n_columns
    assert list(res)[0] == "Date"


def test_date_from_index():
    assert date_from_index(0, EPOCH) == EPOCH
    assert date_from_index(40, EPOCH) == dt.date(2020, 3, 2)


@pytest.mark.parametrize(
    "date, exp",
    (
        (dt.date(2020, 1, 22), "22 Jan 2020\n"),
        (dt.date(2020, 3, 9), "09 Mar 2020\n"),
        (dt.date(2021, 12, 1), "01 Dec 2021\n"),
    ),
)
def test_format_updated_marker(date, exp):
    assert format_updated_marker(date) == exp


def test_write_text_atomic(tmp_path):
    out = tmp_path / "out.csv"
    out.write_text("old")

    write_text_atomic('"a"\n1\n', out)

    assert out.read_bytes() == b'"a"\n1\n'
    assert list(tmp_path.iterdir()) == [out]


def test_write_text_atomic_missing_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        write_text_atomic("a\n", tmp_path / "missing" / "out.csv")


def test_write_text_atomic_failure_keeps_existing_file(tmp_path, monkeypatch):
    out = tmp_path / "out.csv"
    out.write_text("old")

    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", failing_replace)

    with pytest.raises(OSError, match="disk full"):
        write_text_atomic("new\n", out)

    assert out.read_text() == "old"
    assert list(tmp_path.iterdir()) == [out]


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
@pytest.mark.parametrize(
    "umask, exp",
    (
        pytest.param(0o022, 0o644, id="umask-022"),
        pytest.param(0o027, 0o640, id="umask-027"),
    ),
)
def test_write_text_atomic_new_file_mode(tmp_path, umask, exp):
    out = tmp_path / "out.csv"

    previous = os.umask(umask)
    try:
        write_text_atomic("a\n", out)
    finally:
        os.umask(previous)

    assert stat.S_IMODE(out.stat().st_mode) == exp


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions only")
def test_write_text_atomic_keeps_existing_mode(tmp_path):
    out = tmp_path / "updated.txt"
    out.write_text("old")
    out.chmod(0o604)

    write_text_atomic("new\n", out)

    assert out.read_text() == "new\n"
    assert stat.S_IMODE(out.stat().st_mode) == 0o604
