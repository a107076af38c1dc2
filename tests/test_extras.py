import unittest

from extras import calc_extras, format_extras_summary, normalize_extras


class TestNormalizeExtras(unittest.TestCase):
    def test_duplicates_are_removed_in_order(self):
        self.assertEqual(
            normalize_extras(["child_seat", "island_delivery", "child_seat"]),
            ["child_seat", "island_delivery"],
        )

    def test_last_selected_second_driver_wins(self):
        self.assertEqual(
            normalize_extras(["second_driver_south", "child_seat", "second_driver_north"]),
            ["child_seat", "second_driver_north"],
        )
        self.assertEqual(
            normalize_extras(["second_driver_north", "second_driver_south"]),
            ["second_driver_south"],
        )

    def test_reselecting_moves_the_choice(self):
        ids = ["second_driver_south", "second_driver_north", "second_driver_south"]
        self.assertEqual(normalize_extras(ids), ["second_driver_south"])

    def test_idempotent(self):
        for ids in (
            [],
            ["child_seat"],
            ["second_driver_south", "second_driver_north", "child_seat"],
            ["island_delivery", "island_delivery", "second_driver_north"],
        ):
            once = normalize_extras(ids)
            self.assertEqual(normalize_extras(once), once)


class TestCalcExtras(unittest.TestCase):
    def test_empty_selection(self):
        s = calc_extras([])
        self.assertEqual(s.items, [])
        self.assertEqual(s.extras_total, 0)
        self.assertFalse(s.has_by_agreement)

    def test_free_fixed_and_by_agreement(self):
        s = calc_extras(["child_seat", "second_driver_north", "island_delivery"])
        self.assertEqual([i.price for i in s.items], [0, 80, None])
        self.assertEqual(s.extras_total, 80)
        self.assertTrue(s.has_by_agreement)

    def test_unknown_ids_are_skipped(self):
        s = calc_extras(["child_seat", "jetpack"])
        self.assertEqual([i.id for i in s.items], ["child_seat"])

    def test_total_is_sum_of_priced_items(self):
        s = calc_extras(["second_driver_south", "child_seat"])
        self.assertEqual(s.extras_total, sum(i.price for i in s.items if i.price is not None))

    def test_summary_text(self):
        self.assertEqual(format_extras_summary(calc_extras([])), "None")
        text = format_extras_summary(calc_extras(["child_seat", "island_delivery"]))
        self.assertIn("(free)", text)
        self.assertIn("(by agreement)", text)


if __name__ == "__main__":
    unittest.main()
