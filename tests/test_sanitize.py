import math
import uuid
from datetime import date, datetime, timedelta, timezone

from core import sanitize

DEFAULT = datetime(2025, 1, 1, tzinfo=timezone.utc)


class TestStockCount:
    def test_negative_and_non_finite_become_zero(self):
        assert sanitize.stock_count(-5) == 0
        assert sanitize.stock_count(math.nan) == 0
        assert sanitize.stock_count(math.inf) == 0
        assert sanitize.stock_count(None) == 0
        assert sanitize.stock_count("abc") == 0

    def test_fractions_are_floored(self):
        assert sanitize.stock_count(3.7) == 3
        assert sanitize.stock_count("12.9") == 12

    def test_bool_is_not_a_number(self):
        assert sanitize.stock_count(True) == 0

    def test_huge_integers_become_zero(self):
        assert sanitize.stock_count(10**400) == 0
        assert sanitize.positive_quantity(10**400) == 0
        assert sanitize.price(10**400) is None


class TestPositiveQuantity:
    def test_floors_to_zero_when_below_one(self):
        assert sanitize.positive_quantity(0.5) == 0
        assert sanitize.positive_quantity(0) == 0
        assert sanitize.positive_quantity(-3) == 0

    def test_floors_fractional_requests(self):
        assert sanitize.positive_quantity(2.9) == 2


class TestPrice:
    def test_invalid_prices_are_dropped(self):
        assert sanitize.price(-1) is None
        assert sanitize.price(math.inf) is None
        assert sanitize.price("free") is None

    def test_zero_is_a_price(self):
        assert sanitize.price(0) == 0.0


class TestText:
    def test_optional_text_blank_is_absent(self):
        assert sanitize.optional_text("   ") is None
        assert sanitize.optional_text("  memo ") == "memo"

    def test_required_text_trims(self):
        assert sanitize.required_text("  Title ") == "Title"
        assert sanitize.required_text(None) == ""


class TestTimestamp:
    def test_iso_string_with_z(self):
        assert sanitize.timestamp("2024-05-01T10:00:00Z") == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_naive_datetime_is_taken_as_utc(self):
        assert sanitize.timestamp(datetime(2024, 5, 1, 10, 0)).tzinfo == timezone.utc

    def test_date_becomes_midnight(self):
        assert sanitize.timestamp(date(2024, 5, 1)) == datetime(2024, 5, 1, tzinfo=timezone.utc)

    def test_epoch_milliseconds(self):
        assert sanitize.timestamp(1714557600000) == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    def test_garbage_falls_back_to_default(self):
        assert sanitize.timestamp("not a date", default=DEFAULT) == DEFAULT
        assert sanitize.timestamp({"a": 1}, default=DEFAULT) == DEFAULT
        assert sanitize.timestamp(math.nan, default=DEFAULT) == DEFAULT
        assert sanitize.timestamp("", default=DEFAULT) == DEFAULT

    def test_offsets_past_the_calendar_limits_fall_back(self):
        assert sanitize.timestamp("0001-01-01T00:00:00+05:00", default=DEFAULT) == DEFAULT
        assert sanitize.timestamp("9999-12-31T23:59:59-01:00", default=DEFAULT) == DEFAULT
        tz = timezone(timedelta(hours=5))
        assert sanitize.timestamp(datetime(1, 1, 1, tzinfo=tz), default=DEFAULT) == DEFAULT

    def test_huge_epoch_values_fall_back(self):
        assert sanitize.timestamp(10**400, default=DEFAULT) == DEFAULT
        assert sanitize.timestamp(10**20, default=DEFAULT) == DEFAULT

    def test_missing_defaults_to_now(self):
        before = datetime.now(timezone.utc)
        value = sanitize.timestamp(None)
        assert before <= value <= datetime.now(timezone.utc)


class TestEntityId:
    def test_uuid_strings_are_parsed(self):
        raw = uuid.uuid4()
        assert sanitize.entity_id(str(raw)) == raw

    def test_legacy_ids_map_to_stable_uuids(self):
        assert sanitize.entity_id("work-1") == sanitize.entity_id("work-1")
        assert sanitize.entity_id("work-1") != sanitize.entity_id("work-2")

    def test_blank_id_is_absent(self):
        assert sanitize.entity_id("  ") is None
