"""
Tests of `csse_timeseries.config`
"""

import datetime as dt
import json
import re
from pathlib import Path

import pytest

from csse_timeseries.config import (
    DEFAULT_DAILY_REPORT_DATASETS,
    ConversionConfig,
    DatasetConfig,
    get_daily_report_location_template,
    get_default_output_dir,
    get_time_series_locations,
    load_conversion_config,
    to_output_schema,
)
from csse_timeseries.constants import DAILY_REPORT_URL_TEMPLATE, EPOCH, TIME_SERIES_URLS
from csse_timeseries.exceptions import UnrecognisedValueError
from csse_timeseries.rollup import Granularity, RollupPolicy
from csse_timeseries.serialisation import OutputSchema


@pytest.mark.parametrize(
    "schema, exp",
    (
        (OutputSchema.SIMPLE, 0),
        (OutputSchema.GRANULAR, 2),
    ),
)
def test_first_output_index(schema, exp):
    assert DatasetConfig("x.csv", schema=schema).first_output_index == exp


def test_dataset_from_dict():
    res = DatasetConfig.from_dict(
        {
            "filename": "canada.csv",
            "country_region": "Canada",
            "granularity": "STATE",
            "schema": "simple",
            "rolling_window": 7,
        }
    )

    assert res == DatasetConfig(
        filename="canada.csv",
        policy=RollupPolicy(country_region="Canada", granularity=Granularity.STATE),
        schema=OutputSchema.SIMPLE,
        rolling_window=7,
    )


@pytest.mark.parametrize(
    "rolling_window",
    (
        pytest.param(0, id="zero"),
        pytest.param(-7, id="negative"),
        pytest.param(2.5, id="float"),
        pytest.param("7", id="str"),
        pytest.param(True, id="bool"),
    ),
)
def test_dataset_invalid_rolling_window(rolling_window):
    with pytest.raises(
        ValueError,
        match=re.escape(
            "`rolling_window` must be a whole number of at least 1 (or None). "
            f"Received {rolling_window!r}"
        ),
    ):
        DatasetConfig("x.csv", rolling_window=rolling_window)


def test_load_conversion_config_invalid_rolling_window(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps({"datasets": [{"filename": "us.csv", "rolling_window": 0}]})
    )

    with pytest.raises(ValueError, match=re.escape("`rolling_window`")):
        load_conversion_config(config_file)


def test_to_output_schema_unrecognised():
    with pytest.raises(
        UnrecognisedValueError,
        match=re.escape("'simpel' is not a recognised value for schema"),
    ):
        to_output_schema("simpel")


def test_default_datasets():
    filenames = [d.filename for d in DEFAULT_DAILY_REPORT_DATASETS]

    assert filenames == [
        "COVID-19-Global.csv",
        "COVID-19-Global-Detail.csv",
        "COVID-19-US-States.csv",
        "COVID-19-US-Counties.csv",
    ]
    assert all(d.schema == OutputSchema.GRANULAR for d in DEFAULT_DAILY_REPORT_DATASETS)


@pytest.mark.parametrize(
    "source, exp",
    (
        pytest.param(
            "https://example.com/daily/",
            "https://example.com/daily/{date:%m-%d-%Y}.csv",
            id="url",
        ),
        pytest.param(
            "/data/{date:%Y%m%d}.csv", "/data/{date:%Y%m%d}.csv", id="template"
        ),
        pytest.param(
            "data", str(Path("data") / "{date:%m-%d-%Y}.csv"), id="directory"
        ),
    ),
)
def test_get_daily_report_location_template(source, exp):
    res = get_daily_report_location_template(source)

    assert res == exp
    assert res.format(date=dt.date(2020, 3, 1)).endswith(".csv")


def test_get_time_series_locations():
    assert get_time_series_locations(None) == dict(TIME_SERIES_URLS)

    res = get_time_series_locations("https://example.com/ts")
    assert res["deaths"] == "https://example.com/ts/time_series_19-covid-Deaths.csv"


def test_conversion_config_defaults():
    config = ConversionConfig()

    assert config.output_dir == get_default_output_dir()
    assert config.datasets == DEFAULT_DAILY_REPORT_DATASETS
    assert config.updated_path is None
    assert config.epoch == EPOCH
    assert config.daily_report_location_template == DAILY_REPORT_URL_TEMPLATE
    assert config.get_output_path(config.datasets[0]) == (
        get_default_output_dir() / "COVID-19-Global.csv"
    )


def test_conversion_config_converts_paths():
    config = ConversionConfig(output_dir="out", updated_path="out/updated.txt")

    assert config.output_dir == Path("out")
    assert config.updated_path == Path("out/updated.txt")


def test_load_conversion_config(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps(
            {
                "output_dir": str(tmp_path / "out"),
                "epoch": "2020-03-01",
                "max_days": 10,
                "datasets": [
                    {"filename": "us.csv", "country_region": "US"},
                    {"filename": "world.csv", "granularity": "country"},
                ],
            }
        )
    )

    res = load_conversion_config(config_file, max_days=3, source=None)

    assert res.output_dir == tmp_path / "out"
    assert res.epoch == dt.date(2020, 3, 1)
    assert res.max_days == 3
    assert res.source is None
    assert [d.filename for d in res.datasets] == ["us.csv", "world.csv"]
    assert res.datasets[1].policy.granularity == Granularity.COUNTRY
