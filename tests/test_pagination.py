import unittest

from weektable.pagination import PaginationController, last_page, visible


class TestPaginationFunctions(unittest.TestCase):
    def test_last_page(self) -> None:
        self.assertEqual(last_page(0, 100), 0)
        self.assertEqual(last_page(1, 100), 1)
        self.assertEqual(last_page(100, 100), 1)
        self.assertEqual(last_page(101, 100), 2)

    def test_visible_is_monotonic_and_bounded(self) -> None:
        items = list(range(250))
        lengths = [len(visible(items, page, 100)) for page in range(1, 6)]
        self.assertEqual(lengths, [100, 200, 250, 250, 250])
        self.assertEqual(lengths, sorted(lengths))

    def test_visible_keeps_prefix(self) -> None:
        self.assertEqual(visible(["a", "b", "c"], 1, 2), ["a", "b"])


class TestPaginationController(unittest.TestCase):
    def test_advance_clamps_at_last_page(self) -> None:
        pager = PaginationController(page_size=10)
        pager.reset(list(range(25)))
        self.assertEqual(pager.last_page, 3)

        self.assertTrue(pager.advance())
        self.assertTrue(pager.advance())
        self.assertEqual(pager.page, 3)
        self.assertFalse(pager.advance())
        self.assertEqual(pager.page, 3)
        self.assertEqual(len(pager.visible), 25)
        self.assertFalse(pager.has_more)

    def test_advance_on_empty_results_is_noop(self) -> None:
        pager = PaginationController(page_size=10)
        pager.reset([])
        self.assertFalse(pager.advance())
        self.assertEqual(pager.page, 1)
        self.assertEqual(pager.visible, [])

    def test_only_transition_into_visible_advances(self) -> None:
        pager = PaginationController(page_size=10)
        pager.reset(list(range(100)))

        self.assertTrue(pager.on_visibility(True))
        self.assertFalse(pager.on_visibility(True))  # still intersecting
        self.assertEqual(pager.page, 2)

        self.assertFalse(pager.on_visibility(False))
        self.assertTrue(pager.on_visibility(True))
        self.assertEqual(pager.page, 3)

    def test_reset_goes_back_to_page_one_and_scrolls_up(self) -> None:
        scrolls = []
        pager = PaginationController(page_size=10, on_scroll_reset=lambda: scrolls.append("top"))
        pager.reset(list(range(50)))
        pager.advance()
        pager.advance()

        pager.reset(list(range(5)))
        self.assertEqual(pager.page, 1)
        self.assertEqual(pager.visible, list(range(5)))
        self.assertEqual(scrolls, ["top", "top"])

    def test_reset_clears_intersection_state(self) -> None:
        pager = PaginationController(page_size=10)
        pager.reset(list(range(50)))
        pager.on_visibility(True)
        pager.reset(list(range(50)))
        # sentinel is seen again after the new result set is shown
        self.assertTrue(pager.on_visibility(True))
        self.assertEqual(pager.page, 2)

    def test_invalid_page_size(self) -> None:
        with self.assertRaises(ValueError):
            PaginationController(page_size=0)


if __name__ == "__main__":
    unittest.main()
