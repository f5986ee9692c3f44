"""Navigator cursor moves, prefetch promotion, stale-write guard and watching."""

from __future__ import annotations

import threading
import unittest
from pathlib import Path

from lazynav.errors import ListFailedError, NoParentError, NotFoundError, WatchError
from lazynav.navigator import Navigator
from tests.fake_store import FakeDirectoryStore

P = Path


def _names(entries) -> list[str]:
    return [entry.name for entry in entries]


def _make_navigator(test: unittest.TestCase, store: FakeDirectoryStore, path: str) -> Navigator:
    navigator = Navigator(P(path), store)
    test.addCleanup(navigator.close)
    return navigator


class NavigatorScenarioTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = FakeDirectoryStore(
            {
                "/": [("a", True)],
                "/a": [("b", True), ("c", False)],
                "/a/b": [("d", False)],
            }
        )

    def test_to_child_then_to_parent_restores_without_relisting(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        cursor = navigator.to_child(P("/a/b"))
        self.assertEqual(cursor.current_path, P("/a/b"))
        self.assertEqual(cursor.parent_path, P("/a"))
        self.assertEqual(_names(cursor.parent_entries), ["b", "c"])
        self.assertEqual(_names(cursor.current_entries), ["d"])

        cursor = navigator.to_parent()
        self.assertEqual(cursor.current_path, P("/a"))
        self.assertEqual(_names(cursor.current_entries), ["b", "c"])
        self.assertEqual(cursor.parent_path, P("/"))
        self.assertEqual(self.store.list_count("/a"), 1)

    def test_round_trip_keeps_sibling_handles_without_relisting(self) -> None:
        self.store.set_dir("/a", [("b", True), ("c", True)])
        self.store.set_dir("/a/c", [("e", False)])
        navigator = _make_navigator(self, self.store, "/a")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        sibling = navigator.current_cursor().entry_for(P("/a/c"))

        navigator.to_child(P("/a/b"))
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        cursor = navigator.to_parent()
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        self.assertEqual(self.store.list_count("/a/c"), 1)
        self.assertEqual(self.store.list_count("/a/b"), 1)
        returned = cursor.entry_for(P("/a/c"))
        assert sibling is not None and returned is not None
        self.assertIs(returned.child_items, sibling.child_items)
        self.assertIs(navigator.prefetch.peek(P("/a/c")), sibling.child_items)
        self.assertEqual(_names(returned.resolved_children() or []), ["e"])

    def test_invalidated_sibling_is_listed_again_after_round_trip(self) -> None:
        self.store.set_dir("/a", [("b", True), ("c", True)])
        self.store.set_dir("/a/c", [])
        navigator = _make_navigator(self, self.store, "/a")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        navigator.to_child(P("/a/b"))
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        self.store.set_dir("/a/c", [("late", False)])
        navigator.invalidate(P("/a/c"))
        cursor = navigator.to_parent()
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        self.assertEqual(self.store.list_count("/a/c"), 2)
        entry = navigator.current_cursor().entry_for(P("/a/c"))
        assert entry is not None
        self.assertEqual(_names(entry.resolved_children() or []), ["late"])
        self.assertEqual(cursor.current_path, P("/a"))

    def test_round_trip_restores_identical_entries(self) -> None:
        self.store.set_dir("/a", [("b", True), ("c", False), ("e", False)])
        navigator = _make_navigator(self, self.store, "/a")
        before = navigator.current_cursor().current_entries

        navigator.to_child(P("/a/b"))
        after = navigator.to_parent().current_entries

        self.assertEqual(list(after), list(before))
        self.assertEqual(_names(after), ["b", "c", "e"])

    def test_to_path_on_current_path_returns_same_cursor_without_io(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        cursor = navigator.current_cursor()
        calls_before = len(self.store.list_calls)

        self.assertIs(navigator.to_path(P("/a")), cursor)
        self.assertIs(navigator.current_cursor(), cursor)
        self.assertEqual(len(self.store.list_calls), calls_before)

    def test_to_path_dispatches_to_parent_and_child(self) -> None:
        navigator = _make_navigator(self, self.store, "/a/b")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        list_a_before = self.store.list_count("/a")

        cursor = navigator.to_path(P("/a"))
        self.assertEqual(cursor.current_path, P("/a"))
        self.assertEqual(self.store.list_count("/a"), list_a_before)

        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        list_b_before = self.store.list_count("/a/b")
        cursor = navigator.to_path(P("/a/b"))
        self.assertEqual(cursor.current_path, P("/a/b"))
        self.assertEqual(self.store.list_count("/a/b"), list_b_before)

    def test_initial_cursor_fetches_parent_entries_in_background(self) -> None:
        navigator = _make_navigator(self, self.store, "/a/b")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        cursor = navigator.current_cursor()
        self.assertEqual(cursor.parent_path, P("/a"))
        self.assertEqual(_names(cursor.parent_entries), ["b", "c"])


class NavigatorPrefetchTests(unittest.TestCase):
    def test_to_child_into_prefetched_grandchild_issues_no_list(self) -> None:
        store = FakeDirectoryStore(
            {
                "/": [("a", True)],
                "/a": [("b", True)],
                "/a/b": [("g", True)],
                "/a/b/g": [("x", False)],
            }
        )
        navigator = _make_navigator(self, store, "/a")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        navigator.to_child(P("/a/b"))
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        calls_before = len(store.list_calls)

        cursor = navigator.to_child(P("/a/b/g"))
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        self.assertEqual(_names(cursor.current_entries), ["x"])
        self.assertEqual(len(store.list_calls), calls_before)
        self.assertEqual(store.list_count("/a/b/g"), 1)

    def test_failed_grandchild_listing_is_logged_and_retried_on_navigation(self) -> None:
        store = FakeDirectoryStore(
            {
                "/": [("a", True)],
                "/a": [("locked", True), ("open", True)],
                "/a/open": [],
            }
        )
        with self.assertLogs("lazynav.navigator.prefetch", level="WARNING") as logs:
            navigator = _make_navigator(self, store, "/a")
            self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        self.assertTrue(any("/a/locked" in line for line in logs.output))
        self.assertEqual(navigator.current_cursor().current_path, P("/a"))
        self.assertNotIn(P("/a/locked"), navigator.prefetch)

        store.set_dir("/a/locked", [("secret", False)])
        cursor = navigator.to_child(P("/a/locked"))
        self.assertEqual(_names(cursor.current_entries), ["secret"])
        self.assertEqual(store.list_count("/a/locked"), 2)

    def test_prefetch_arena_only_keeps_cursor_neighbourhood(self) -> None:
        store = FakeDirectoryStore(
            {
                "/": [("a", True), ("z", True)],
                "/a": [("b", True), ("c", True)],
                "/a/b": [("d", True)],
                "/a/b/d": [],
                "/a/c": [],
                "/z": [],
            }
        )
        navigator = _make_navigator(self, store, "/a")
        navigator.to_child(P("/a/b"))
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        self.assertEqual(navigator.prefetch.paths(), {P("/a/b"), P("/a"), P("/a/b/d")})

    def test_stale_parent_listing_is_not_written_into_cursor(self) -> None:
        store = FakeDirectoryStore(
            {
                "/": [("a", True), ("q", True)],
                "/a": [("b", True)],
                "/a/b": [],
                "/q": [],
            }
        )
        gate = threading.Event()
        store.gates[P("/a")] = gate
        navigator = _make_navigator(self, store, "/a/b")
        self.assertIsNone(navigator.current_cursor().parent_entries)

        cursor = navigator.to_path(P("/q"))
        gate.set()
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        live = navigator.current_cursor()
        self.assertEqual(live.current_path, P("/q"))
        self.assertEqual(live.parent_path, P("/"))
        self.assertEqual(_names(live.parent_entries), ["a", "q"])
        self.assertGreater(live.generation, 1)
        self.assertEqual(cursor.current_path, live.current_path)

    def test_to_parent_waits_for_in_flight_parent_listing(self) -> None:
        store = FakeDirectoryStore(
            {
                "/": [("a", True)],
                "/a": [("b", True), ("c", False)],
                "/a/b": [],
            }
        )
        gate = threading.Event()
        store.gates[P("/a")] = gate
        navigator = _make_navigator(self, store, "/a/b")
        timer = threading.Timer(0.05, gate.set)
        timer.start()
        self.addCleanup(timer.cancel)

        cursor = navigator.to_parent()

        self.assertEqual(cursor.current_path, P("/a"))
        self.assertEqual(_names(cursor.current_entries), ["b", "c"])
        self.assertEqual(store.list_count("/a"), 1)


class NavigatorErrorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = FakeDirectoryStore(
            {
                "/": [("a", True)],
                "/a": [("b", True), ("c", False)],
                "/a/b": [],
            }
        )

    def test_to_child_rejects_files_and_unknown_paths(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        with self.assertRaises(NotFoundError):
            navigator.to_child(P("/a/c"))
        with self.assertRaises(NotFoundError):
            navigator.to_child(P("/a/missing"))
        self.assertEqual(navigator.current_cursor().current_path, P("/a"))

    def test_to_parent_at_root_raises_no_parent(self) -> None:
        navigator = _make_navigator(self, self.store, "/")
        self.assertIsNone(navigator.current_cursor().parent_path)
        with self.assertRaises(NoParentError):
            navigator.to_parent()

    def test_to_path_failure_leaves_cursor_untouched(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        before = navigator.current_cursor()
        with self.assertRaises(ListFailedError) as ctx:
            navigator.to_path(P("/nowhere"))
        self.assertEqual(ctx.exception.path, P("/nowhere"))
        self.assertIs(navigator.current_cursor(), before)

    def test_constructor_raises_when_initial_path_cannot_be_listed(self) -> None:
        with self.assertRaises(ListFailedError):
            Navigator(P("/nowhere"), self.store)


class NavigatorRefreshAndWatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = FakeDirectoryStore(
            {
                "/": [("a", True), ("x", True), ("y", True), ("z", True)],
                "/a": [("b", True)],
                "/a/b": [],
                "/x": [],
                "/y": [],
                "/z": [],
            }
        )

    def test_refresh_current_replaces_entries_only(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        before = navigator.current_cursor()
        self.store.set_dir("/a", [("b", True), ("new.txt", False)])

        after = navigator.refresh_current()

        self.assertEqual(_names(after.current_entries), ["b", "new.txt"])
        self.assertIs(after.parent_entries, before.parent_entries)
        self.assertEqual(after.parent_path, before.parent_path)
        self.assertEqual(after.generation, before.generation)

    def test_single_live_watch_after_sequential_jumps(self) -> None:
        """Three jumps leave one live watch; each superseded one is cancelled once.

        The watch on the starting directory also counts as superseded, so
        four subscriptions exist and three cancels happen in total. Among the
        subscriptions created by the jumps themselves, two are cancelled.
        """
        navigator = _make_navigator(self, self.store, "/a")
        navigator.start_watching()
        initial = self.store.subscriptions[0]

        for target in ("/x", "/y", "/z"):
            navigator.to_path(P(target))

        live = self.store.live_subscriptions()
        self.assertEqual(len(live), 1)
        self.assertEqual(live[0].path, P("/z"))
        self.assertIs(navigator.subscription, live[0])
        superseded = [sub for sub in self.store.subscriptions if sub is not live[0]]
        self.assertEqual([sub.cancel_calls for sub in superseded], [1, 1, 1])

        from_jumps = [sub for sub in self.store.subscriptions if sub is not initial]
        self.assertEqual([sub.path for sub in from_jumps], [P("/x"), P("/y"), P("/z")])
        self.assertEqual(sum(sub.cancel_calls for sub in from_jumps), 2)
        self.assertEqual(initial.cancel_calls, 1)

    def test_change_notification_refreshes_current_directory(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        navigator.start_watching()
        seen = []
        navigator.add_listener(seen.append)
        self.store.set_dir("/a", [("b", True), ("fresh", False)])

        self.store.subscriptions[-1].fire()

        self.assertEqual(_names(navigator.current_cursor().current_entries), ["b", "fresh"])
        self.assertEqual(_names(seen[-1].current_entries), ["b", "fresh"])

    def test_notification_for_abandoned_path_is_dropped(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        navigator.start_watching()
        first = self.store.subscriptions[0]
        navigator.to_path(P("/x"))
        calls_before = self.store.list_count("/a")

        first.fire()

        self.assertEqual(self.store.list_count("/a"), calls_before)
        self.assertEqual(navigator.current_cursor().current_path, P("/x"))

    def test_watch_failure_is_raised_after_cursor_moves(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        navigator.start_watching()
        self.store.watch_error_paths.add(P("/x"))

        with self.assertRaises(WatchError):
            navigator.to_path(P("/x"))

        self.assertEqual(navigator.current_cursor().current_path, P("/x"))
        self.assertIsNone(navigator.subscription)
        self.assertEqual(self.store.subscriptions[0].cancel_calls, 1)

    def test_invalidate_child_gives_it_a_fresh_handle(self) -> None:
        navigator = _make_navigator(self, self.store, "/a")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        old_handle = navigator.current_cursor().entry_for(P("/a/b")).child_items
        self.store.set_dir("/a/b", [("late", False)])

        navigator.invalidate(P("/a/b"))
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        new_handle = navigator.current_cursor().entry_for(P("/a/b")).child_items
        self.assertIsNot(new_handle, old_handle)
        cursor = navigator.to_child(P("/a/b"))
        self.assertEqual(_names(cursor.current_entries), ["late"])

    def test_invalidate_parent_refetches_parent_entries(self) -> None:
        navigator = _make_navigator(self, self.store, "/a/b")
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))
        self.store.set_dir("/a", [("b", True), ("sibling", True)])

        navigator.invalidate(P("/a"))
        self.assertTrue(navigator.wait_for_prefetch(timeout=2.0))

        self.assertEqual(_names(navigator.current_cursor().parent_entries), ["b", "sibling"])


if __name__ == "__main__":
    unittest.main()
