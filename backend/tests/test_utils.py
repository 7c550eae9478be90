# backend/tests/test_utils.py
from datetime import datetime, timezone, timedelta

import pytest

from roombridge.shared.utils.exceptions import InvalidIdError
from roombridge.shared.utils.ids import is_valid_object_id, new_object_id, require_object_id
from roombridge.shared.utils.time_utils import (
    isoformat_utc,
    parse_timestamp,
    to_epoch_ms,
    wati_timestamp_to_iso,
)


# --- IDS ---

def test_new_object_id_shape():
    value = new_object_id()
    assert len(value) == 24
    assert is_valid_object_id(value)


def test_require_object_id():
    assert require_object_id("ABCDEF0123456789ABCDEF01") == "abcdef0123456789abcdef01"
    with pytest.raises(InvalidIdError) as exc:
        require_object_id("123", "Contact")
    assert exc.value.message == "Invalid contact ID"


# --- TIMESTAMPS ---

def test_wati_timestamp_is_argentina_wall_clock():
    assert wati_timestamp_to_iso("1700000000") == "2023-11-14T19:13:20.000"
    assert wati_timestamp_to_iso(1700000000.5) == "2023-11-14T19:13:20.500"


def test_wati_timestamp_falls_back_to_now():
    value = wati_timestamp_to_iso("not-a-number")
    assert len(value) == len("2023-11-14T19:13:20.000")
    assert not value.endswith("Z")


def test_isoformat_utc():
    assert isoformat_utc(None) is None
    assert isoformat_utc(datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)) == "2024-01-01T12:00:00.123Z"
    # Other offsets are converted, naive values read as UTC
    assert isoformat_utc(datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=-3)))) == "2024-01-01T12:00:00.000Z"
    assert isoformat_utc(datetime(2024, 1, 1, 12, 0)) == "2024-01-01T12:00:00.000Z"


@pytest.mark.parametrize("value", [
    "2024-01-01T12:00:00.000Z",
    "2024-01-01T12:00:00",
    "2024-01-01T09:00:00-03:00",
    1704110400000,
    "1704110400000",
    datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
])
def test_to_epoch_ms_accepts_every_representation(value):
    assert to_epoch_ms(value) == 1704110400000


def test_parse_timestamp_rejects_garbage():
    assert parse_timestamp("") is None
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None
    assert to_epoch_ms("yesterday") is None
