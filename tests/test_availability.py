import unittest
from datetime import datetime, timedelta, timezone

from sqlmodel import Session

import db
from availability import get_unavailable_slugs, has_overlap, is_car_available
from errors import ValidationError
from search import search_cars
from support import future, insert_booking, reset_db

T0 = datetime(2030, 6, 1, 10, 0, tzinfo=timezone.utc)
DAY = timedelta(days=1)


class TestHasOverlap(unittest.TestCase):
    def test_symmetric(self):
        cases = [
            (T0, T0 + 3 * DAY, T0 + DAY, T0 + 5 * DAY),
            (T0, T0 + DAY, T0 + 2 * DAY, T0 + 3 * DAY),
            (T0, T0 + 4 * DAY, T0 + DAY, T0 + 2 * DAY),
        ]
        for s1, e1, s2, e2 in cases:
            self.assertEqual(has_overlap(s1, e1, s2, e2), has_overlap(s2, e2, s1, e1))

    def test_january_windows(self):
        jan = lambda d: datetime(2030, 1, d, tzinfo=timezone.utc)  # noqa: E731
        self.assertTrue(has_overlap(jan(1), jan(5), jan(4), jan(8)))
        self.assertFalse(has_overlap(jan(1), jan(5), jan(5), jan(8)))

    def test_adjacent_intervals_do_not_overlap(self):
        self.assertFalse(has_overlap(T0, T0 + DAY, T0 + DAY, T0 + 2 * DAY))

    def test_contained_interval_overlaps(self):
        self.assertTrue(has_overlap(T0, T0 + 5 * DAY, T0 + DAY, T0 + 2 * DAY))

    def test_nonempty_interval_overlaps_itself(self):
        self.assertTrue(has_overlap(T0, T0 + DAY, T0, T0 + DAY))


class TestAvailability(unittest.TestCase):
    def setUp(self):
        reset_db()
        self.start = future(40)
        self.end = self.start + 3 * DAY

    def test_active_booking_blocks(self):
        insert_booking("audi-a5-cabrio-2022", self.start, self.end)
        with Session(db.engine) as s:
            self.assertFalse(is_car_available(s, "audi-a5-cabrio-2022", self.start + DAY, self.end + DAY))
            self.assertTrue(is_car_available(s, "hyundai-i20", self.start, self.end))

    def test_cancelled_booking_does_not_block(self):
        insert_booking("audi-a5-cabrio-2022", self.start, self.end, status="CANCELLED")
        with Session(db.engine) as s:
            self.assertTrue(is_car_available(s, "audi-a5-cabrio-2022", self.start, self.end))

    def test_back_to_back_is_available(self):
        insert_booking("audi-a5-cabrio-2022", self.start, self.end)
        with Session(db.engine) as s:
            self.assertTrue(is_car_available(s, "audi-a5-cabrio-2022", self.end, self.end + DAY))

    def test_bulk_lookup(self):
        insert_booking("audi-a5-cabrio-2022", self.start, self.end, status="CONFIRMED")
        insert_booking("hyundai-i20", self.start, self.end)
        with Session(db.engine) as s:
            slugs = get_unavailable_slugs(
                s, ["audi-a5-cabrio-2022", "hyundai-i20", "ford-mustang-cabrio-2018"], self.start, self.end
            )
            self.assertEqual(slugs, {"audi-a5-cabrio-2022", "hyundai-i20"})
            self.assertEqual(get_unavailable_slugs(s, [], self.start, self.end), set())


class TestSearch(unittest.TestCase):
    def setUp(self):
        reset_db()
        self.start = future(50)
        self.end = self.start + 4 * DAY

    def test_confirmed_suv_is_excluded(self):
        insert_booking("jeep-wrangler-sahara-4xe-2022-sky-top", self.start, self.end, status="CONFIRMED")
        with Session(db.engine) as s:
            result = search_cars(s, (self.start + DAY).isoformat(), (self.end + DAY).isoformat(), "suv")
        slugs = [c.slug for c in result.cars]
        self.assertEqual(result.unavailable_slugs, ["jeep-wrangler-sahara-4xe-2022-sky-top"])
        self.assertNotIn("jeep-wrangler-sahara-4xe-2022-sky-top", slugs)
        self.assertTrue(slugs)
        self.assertTrue(all(c.category == "suv" for c in result.cars))

    def test_bad_window_is_rejected(self):
        with Session(db.engine) as s:
            with self.assertRaises(ValidationError):
                search_cars(s, self.end.isoformat(), self.start.isoformat())

    def test_unknown_category_is_rejected(self):
        with Session(db.engine) as s:
            with self.assertRaises(ValidationError):
                search_cars(s, self.start.isoformat(), self.end.isoformat(), "spaceship")


if __name__ == "__main__":
    unittest.main()
