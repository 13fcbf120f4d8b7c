"""
Tests of `csse_timeseries.aggregation`
"""

import re

import pandas as pd
import pytest

from csse_timeseries.aggregation import RECORD_COLUMNS, AggregationStore
from csse_timeseries.records import GeographicKey, Observation
from csse_timeseries.rollup import Granularity, RollupPolicy


def test_empty_store():
    store = AggregationStore()

    assert store.max_date_index == -1
    assert store.n_records == 0
    assert store.records_at(0) == {}

    res = store.to_frame()
    assert res.empty
    assert list(res.columns) == list(RECORD_COLUMNS)
    assert res.index.names == [
        "date_index",
        "country_region",
        "province_state",
        "county_district",
    ]


def test_add_sums():
    store = AggregationStore()
    key = GeographicKey("US", "Illinois", "Cook")

    store.add_observation(0, key, confirmed=2, deaths=1)
    store.add_observation(0, key, confirmed=3, recovered=4)

    assert store.records_at(0) == {
        key: Observation(confirmed=5, deaths=1, recovered=4)
    }


def test_no_deduplication():
    store = AggregationStore()
    key = GeographicKey("France")

    store.add_observation(0, key, confirmed=7)
    store.add_observation(0, key, confirmed=7)

    assert store.records_at(0)[key].confirmed == 14


def test_rollup_merges_counties():
    store = AggregationStore(policy=RollupPolicy(granularity=Granularity.STATE))

    store.add_observation(1, GeographicKey("US", "Illinois", "Cook"), confirmed=10)
    store.add_observation(1, GeographicKey("US", "Illinois", "Kane"), confirmed=5)

    assert store.records_at(1) == {
        GeographicKey("US", "Illinois"): Observation(confirmed=15)
    }
    assert store.n_records == 1


def test_filtered_out():
    store = AggregationStore(policy=RollupPolicy(country_region="US"))

    kept = store.add_observation(0, GeographicKey("Canada", "Ontario"), confirmed=3)

    assert not kept
    assert store.n_records == 0


def test_last_lat_long_wins():
    store = AggregationStore()

    store.add_observation(0, GeographicKey("Italy", latitude="43"), confirmed=1)
    store.add_observation(0, GeographicKey("Italy", latitude="44"), confirmed=1)

    [(key, observation)] = store.records_at(0).items()
    assert key.latitude == "44"
    assert observation.confirmed == 2


def test_ensure_date_index_fills_gaps():
    store = AggregationStore()

    store.add_observation(3, GeographicKey("Italy"), confirmed=1)

    assert store.max_date_index == 3
    for i in range(3):
        assert store.records_at(i) == {}


def test_ensure_date_index_negative():
    with pytest.raises(ValueError, match=re.escape("date_index=-1")):
        AggregationStore().ensure_date_index(-1)


def test_records_at_is_a_copy():
    store = AggregationStore()
    store.add_observation(0, GeographicKey("Italy"), confirmed=1)

    store.records_at(0).clear()

    assert store.n_records == 1


def test_to_frame():
    store = AggregationStore()
    store.add_observation(
        1, GeographicKey("US", "Illinois", "Cook", "41.8", "-87.6"), confirmed=3
    )
    store.add_observation(0, GeographicKey("US", "Illinois", "Cook"), confirmed=1)
    store.add_observation(0, GeographicKey("Canada", "Ontario"), deaths=2)

    res = store.to_frame()

    exp = pd.DataFrame(
        [
            ["", "", 0, 2, 0],
            ["", "", 1, 0, 0],
            ["41.8", "-87.6", 3, 0, 0],
        ],
        columns=list(RECORD_COLUMNS),
        index=pd.MultiIndex.from_tuples(
            [
                (0, "Canada", "Ontario", ""),
                (0, "US", "Illinois", "Cook"),
                (1, "US", "Illinois", "Cook"),
            ],
            names=["date_index", "country_region", "province_state", "county_district"],
        ),
    )
    pd.testing.assert_frame_equal(res, exp)
