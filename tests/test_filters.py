"""
Unit tests for lecture filtering.

Properties checked:
- empty criteria returns every entry
- results are a subsequence of the catalog (order preserved)
- filtering twice with the same criteria changes nothing
"""

import unittest

from weektable.filters import distinct_majors, filter_entries, matches, parse_credits
from weektable.model import Day, SearchCriteria

from tests.helpers import sample_entries


def _ids(entries) -> list:
    return [e.id for e in entries]


class TestFilterEntries(unittest.TestCase):
    def setUp(self) -> None:
        self.entries = sample_entries()

    def test_empty_criteria_returns_everything(self) -> None:
        self.assertEqual(filter_entries(self.entries, SearchCriteria()), self.entries)

    def test_query_matches_title_or_id_case_insensitive(self) -> None:
        c = SearchCriteria().replace("query", "DATA")
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["CS201"])

        c = SearchCriteria().replace("query", "cs")
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["CS101", "CS201"])

    def test_grades_or_within_category(self) -> None:
        c = SearchCriteria().replace("grades", [1, 3])
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["CS101", "MA101", "LA100"])

    def test_majors(self) -> None:
        c = SearchCriteria().replace("majors", ["Math"])
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["MA101"])

    def test_credits_is_a_textual_prefix(self) -> None:
        c = SearchCriteria().replace("credits", 3)
        # "3" and "3.5" both start with "3"
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["CS101", "CS201"])

    def test_days_any_block(self) -> None:
        c = SearchCriteria().replace("days", ["Tue", "Wed"])
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["CS201", "MA101"])

    def test_times_intersect_any_block(self) -> None:
        # CS101 covers slots 1-2, CS201 3-5, MA101 9-10
        c = SearchCriteria().replace("times", [2, 9])
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["CS101", "MA101"])

    def test_days_and_times_are_anded(self) -> None:
        c = SearchCriteria().replace("days", [Day.MON]).replace("times", [9])
        self.assertEqual(filter_entries(self.entries, c), [])

        c = SearchCriteria().replace("days", [Day.WED]).replace("times", [9])
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["MA101"])

    def test_lecture_without_schedule_fails_day_filter(self) -> None:
        c = SearchCriteria().replace("days", [Day.MON, Day.TUE, Day.WED, Day.THU, Day.FRI])
        self.assertNotIn("LA100", _ids(filter_entries(self.entries, c)))

    def test_categories_are_anded(self) -> None:
        c = SearchCriteria().replace("majors", ["CS"]).replace("grades", [2])
        self.assertEqual(_ids(filter_entries(self.entries, c)), ["CS201"])

    def test_idempotent_and_order_preserving(self) -> None:
        criteria = [
            SearchCriteria(),
            SearchCriteria().replace("query", "a"),
            SearchCriteria().replace("grades", [1]).replace("credits", 2),
            SearchCriteria().replace("days", ["Mon", "Wed"]),
        ]
        for c in criteria:
            once = filter_entries(self.entries, c)
            self.assertEqual(filter_entries(once, c), once)

            positions = [self.entries.index(e) for e in once]
            self.assertEqual(positions, sorted(positions))

    def test_matches_single_entry(self) -> None:
        cs101 = self.entries[0]
        self.assertTrue(matches(cs101, SearchCriteria().replace("query", "intro")))
        self.assertFalse(matches(cs101, SearchCriteria().replace("majors", ["Math"])))


class TestParseCredits(unittest.TestCase):
    def test_numbers(self) -> None:
        self.assertEqual(parse_credits("3"), 3)
        self.assertEqual(parse_credits(" 2 "), 2)
        self.assertEqual(parse_credits(1), 1)

    def test_leading_integer(self) -> None:
        self.assertEqual(parse_credits("3.5"), 3)
        self.assertEqual(parse_credits("3학점"), 3)
        self.assertEqual(parse_credits(" 2 credits"), 2)

    def test_unparseable_means_no_filter(self) -> None:
        for value in [None, "", "abc", "x3", "0", 0, True, "²", "٣"]:
            self.assertIsNone(parse_credits(value))

    def test_decimal_credits_still_filter(self) -> None:
        entries = sample_entries()
        criteria = SearchCriteria().replace("credits", parse_credits("3.5"))
        self.assertEqual([e.id for e in filter_entries(entries, criteria)], ["CS101", "CS201"])


class TestDistinctMajors(unittest.TestCase):
    def test_first_seen_order(self) -> None:
        self.assertEqual(distinct_majors(sample_entries()), ["CS", "Math", "Liberal Arts"])


if __name__ == "__main__":
    unittest.main()
