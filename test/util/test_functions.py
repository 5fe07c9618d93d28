import re
import unittest
from datetime import datetime, timezone

from util.functions import (
    INVALID_DATE,
    NO_DATE,
    display_time,
    format_epoch_ms_date,
    generate_key_id,
    mask_secret,
)


class FunctionsTest(unittest.TestCase):

    def test_mask_secret_long(self):
        self.assertEqual(mask_secret("abcdefghijkl"), "abcd...ijkl")

    def test_mask_secret_short(self):
        self.assertEqual(mask_secret("abcde"), "abcd...")

    def test_mask_secret_exactly_eight(self):
        self.assertEqual(mask_secret("abcdefgh"), "abcd...")

    def test_mask_secret_nine(self):
        self.assertEqual(mask_secret("abcdefghi"), "abcd...fghi")

    def test_mask_secret_empty(self):
        self.assertEqual(mask_secret(""), "...")

    def test_mask_secret_custom_lengths(self):
        self.assertEqual(mask_secret("fk-1234567890", prefix = 2, suffix = 3), "fk...890")

    def test_format_epoch_ms_date(self):
        self.assertEqual(format_epoch_ms_date(1704067200000), "2024-01-01")

    def test_format_epoch_ms_date_from_string(self):
        self.assertEqual(format_epoch_ms_date("1706745600000"), "2024-02-01")

    def test_format_epoch_ms_date_missing(self):
        self.assertEqual(format_epoch_ms_date(None), NO_DATE)

    def test_format_epoch_ms_date_invalid(self):
        self.assertEqual(format_epoch_ms_date("not a date"), INVALID_DATE)
        self.assertEqual(format_epoch_ms_date(float("inf")), INVALID_DATE)

    def test_display_time_applies_offset(self):
        moment = datetime(2024, 1, 1, 20, 30, 15, tzinfo = timezone.utc)

        self.assertEqual(display_time(moment, 8), "2024-01-02 04:30:15")
        self.assertEqual(display_time(moment, 0), "2024-01-01 20:30:15")
        self.assertEqual(display_time(moment, -5), "2024-01-01 15:30:15")

    def test_generate_key_id_format(self):
        key_id = generate_key_id()

        self.assertRegex(key_id, re.compile(r"^key-\d+-[a-z0-9]{7}$"))

    def test_generate_key_id_unique(self):
        ids = {generate_key_id() for _ in range(100)}

        self.assertEqual(len(ids), 100)
