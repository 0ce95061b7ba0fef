import json
import tempfile
import threading
import unittest
from pathlib import Path

from poll.domain.Board import AvailabilityBoard, NotFoundError
from poll.events.Event_Bus import EventBus
from poll.infra.Local_Storage import LocalStorage
from poll.infra.Poll_Backend import LocalBackend
from poll.infra.errors import PersistenceError
from poll.utilities.constants import (
    WEEKS_KEY, PARTICIPANTS_KEY, CLEAR_CONFIRM_PROMPT,
    MSG_LOAD_FAILED, MSG_TOGGLE_FAILED, MSG_ADD_FAILED
)


class FlakyStorage(LocalStorage):
    """Local storage whose writes can be switched off."""

    fail_writes = False

    def set_item(self, key, value):
        if self.fail_writes:
            raise PersistenceError("disk full")
        super().set_item(key, value)


class TestLocalBoard(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "local_storage.json"
        self.storage = FlakyStorage(self.path)
        self.board = AvailabilityBoard(LocalBackend(self.storage), bus=EventBus()).mount()

    def tearDown(self):
        self.board.unmount()
        self._tmp.cleanup()

    def _stored(self, key):
        return json.loads(self.storage.get_item(key))

    def _you(self):
        return self.board.participants[0]

    def test_first_run_seeds_defaults(self):
        self.assertEqual([w.label for w in self.board.weeks],
                         ["Jan 15-21", "Jan 22-28", "Jan 29-Feb 4", "Feb 5-11"])
        self.assertEqual(len(self.board.participants), 1)
        you = self._you()
        self.assertEqual(you.name, "You")
        self.assertTrue(you.protected)
        self.assertEqual(you.availability, [False, False, False, False])
        # Seeds are written right away so the ids stay stable across restarts
        self.assertEqual(len(self._stored(WEEKS_KEY)), 4)
        self.assertEqual(self._stored(PARTICIPANTS_KEY)[0]["id"], you.id)

    def test_toggle_week_index_two(self):
        you = self._you()
        self.board.toggle_availability(you.id, 2)
        self.assertEqual(self._you().availability, [False, False, True, False])
        stored = self._stored(PARTICIPANTS_KEY)
        self.assertEqual(stored[0]["availability"], [False, False, True, False])

    def test_double_toggle_restores_every_flag(self):
        you_id = self._you().id
        for index in range(len(self.board.weeks)):
            before = list(self._you().availability)
            self.board.toggle_availability(you_id, index)
            self.board.toggle_availability(you_id, index)
            self.assertEqual(self._you().availability, before)

    def test_toggle_rejects_invalid_index(self):
        you_id = self._you().id
        for index in (4, -1, 10):
            with self.assertRaises(ValueError):
                self.board.toggle_availability(you_id, index)
        self.assertEqual(self._you().availability, [False] * 4)

    def test_toggle_unknown_participant(self):
        with self.assertRaises(NotFoundError):
            self.board.toggle_availability("nobody", 0)

    def test_add_participant_alex(self):
        alex = self.board.add_participant("Alex")
        self.assertEqual(len(self.board.participants), 2)
        self.assertEqual(alex.name, "Alex")
        self.assertEqual(alex.availability, [False, False, False, False])
        self.assertIn("Alex", [r["name"] for r in self._stored(PARTICIPANTS_KEY)])

    def test_add_blank_name_is_noop(self):
        before = self.storage.get_item(PARTICIPANTS_KEY)
        for name in ("", "   ", "\t\n"):
            self.assertIsNone(self.board.add_participant(name))
        self.assertEqual(len(self.board.participants), 1)
        self.assertEqual(self.storage.get_item(PARTICIPANTS_KEY), before)

    def test_add_uses_input_and_clears_it(self):
        self.board.new_participant_name = "  Sam  "
        sam = self.board.add_participant()
        self.assertEqual(sam.name, "Sam")
        self.assertEqual(self.board.new_participant_name, "")

    def test_explicit_name_leaves_input_alone(self):
        self.board.new_participant_name = "Typed"
        self.board.add_participant("Sam")
        self.assertEqual(self.board.new_participant_name, "Typed")

    def test_concurrent_adds_keep_every_record(self):
        names = [f"P{i}" for i in range(8)]
        threads = [threading.Thread(target=self.board.add_participant, args=(n,)) for n in names]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)
        stored = sorted(r["name"] for r in self._stored(PARTICIPANTS_KEY))
        self.assertEqual(stored, sorted(names + ["You"]))
        self.assertEqual(len(self.board.participants), 9)

    def test_remove_participant(self):
        alex = self.board.add_participant("Alex")
        self.board.remove_participant(alex.id)
        self.assertEqual([p.name for p in self.board.participants], ["You"])
        self.assertEqual([r["name"] for r in self._stored(PARTICIPANTS_KEY)], ["You"])

    def test_protected_participant_cannot_be_removed(self):
        you = self._you()
        self.assertFalse(self.board.rows()[0]["removable"])
        with self.assertRaises(ValueError):
            self.board.remove_participant(you.id)
        self.assertEqual(len(self.board.participants), 1)
        self.assertEqual(len(self._stored(PARTICIPANTS_KEY)), 1)

    def test_edit_week_label(self):
        self.board.start_editing_week(self.board.weeks[0])
        self.assertEqual(self.board.editing_week_id, 1)
        self.assertEqual(self.board.editing_label, "Jan 15-21")
        self.assertTrue(self.board.save_week_label("Jan 16-22"))
        self.assertEqual([w.label for w in self.board.weeks],
                         ["Jan 16-22", "Jan 22-28", "Jan 29-Feb 4", "Feb 5-11"])
        self.assertIsNone(self.board.editing_week_id)
        self.assertEqual(self.board.editing_label, "")
        self.assertEqual(self._stored(WEEKS_KEY), [w.to_dict() for w in self.board.weeks])

    def test_blank_label_is_discarded(self):
        self.board.start_editing_week(2)
        self.assertFalse(self.board.save_week_label("   "))
        self.assertEqual(self.board.weeks[1].label, "Jan 22-28")
        self.assertIsNone(self.board.editing_week_id)

    def test_only_one_week_in_edit_mode(self):
        self.board.start_editing_week(1)
        self.board.start_editing_week(3)
        self.assertEqual(self.board.editing_week_id, 3)
        self.assertEqual(self.board.editing_label, "Jan 29-Feb 4")

    def test_clear_declined_changes_nothing(self):
        alex = self.board.add_participant("Alex")
        self.board.toggle_availability(alex.id, 1)
        raw = self.path.read_text(encoding="utf-8")
        prompts = []

        def decline(prompt):
            prompts.append(prompt)
            return False

        self.assertFalse(self.board.clear_all_data(confirm=decline))
        self.assertEqual(prompts, [CLEAR_CONFIRM_PROMPT])
        self.assertEqual(len(self.board.participants), 2)
        self.assertEqual(self.path.read_text(encoding="utf-8"), raw)

    def test_clear_without_confirmation_is_declined(self):
        self.board.add_participant("Alex")
        self.assertFalse(self.board.clear_all_data())
        self.assertEqual(len(self.board.participants), 2)

    def test_clear_accepted_resets_defaults(self):
        self.board.add_participant("Alex")
        self.board.rename_week(1, "Jan 16-22")
        self.assertTrue(self.board.clear_all_data(confirm=lambda prompt: True))
        self.assertEqual([w.label for w in self.board.weeks],
                         ["Jan 15-21", "Jan 22-28", "Jan 29-Feb 4", "Feb 5-11"])
        self.assertEqual([p.name for p in self.board.participants], ["You"])
        self.assertTrue(self.board.participants[0].protected)
        self.assertEqual(self._stored(WEEKS_KEY)[0]["label"], "Jan 15-21")
        self.assertEqual([r["name"] for r in self._stored(PARTICIPANTS_KEY)], ["You"])

    def test_state_survives_a_new_board(self):
        alex = self.board.add_participant("Alex")
        self.board.toggle_availability(alex.id, 3)
        self.board.rename_week(4, "Feb 6-12")
        with AvailabilityBoard(LocalBackend(LocalStorage(self.path)), bus=EventBus()) as again:
            self.assertEqual([p.name for p in again.participants], ["You", "Alex"])
            self.assertEqual(again.participants[1].availability, [False, False, False, True])
            self.assertEqual(again.weeks[3].label, "Feb 6-12")

    def test_write_failure_sets_banner_and_keeps_local_change(self):
        self.storage.fail_writes = True
        you_id = self._you().id
        self.board.toggle_availability(you_id, 0)
        self.assertEqual(self.board.error, MSG_TOGGLE_FAILED)
        self.assertEqual(self._you().availability, [True, False, False, False])
        self.assertEqual(self._stored(PARTICIPANTS_KEY)[0]["availability"], [False] * 4)

    def test_failed_add_keeps_input(self):
        self.storage.fail_writes = True
        self.board.new_participant_name = "Alex"
        self.board.add_participant()
        self.assertEqual(self.board.error, MSG_ADD_FAILED)
        self.assertEqual(self.board.new_participant_name, "Alex")

    def test_error_stays_until_overwritten(self):
        self.storage.fail_writes = True
        self.board.toggle_availability(self._you().id, 0)
        self.storage.fail_writes = False
        self.board.toggle_availability(self._you().id, 1)
        self.assertEqual(self.board.error, MSG_TOGGLE_FAILED)


class TestLocalBoardLoading(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "local_storage.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_legacy_layout_is_read(self):
        legacy = {
            WEEKS_KEY: json.dumps([{"id": 1, "label": "Jan 15-21"}, {"id": 2, "label": "Jan 22-28"},
                                   {"id": 3, "label": "Jan 29-Feb 4"}, {"id": 4, "label": "Feb 5-11"}]),
            PARTICIPANTS_KEY: json.dumps([
                {"id": 1, "name": "You", "availability": [True, False, False, False]},
                {"id": 2, "name": "Alex", "availability": [False, False, True, False]},
            ]),
        }
        self.path.write_text(json.dumps(legacy), encoding="utf-8")
        with AvailabilityBoard(LocalBackend(LocalStorage(self.path)), bus=EventBus()) as board:
            self.assertEqual([p.id for p in board.participants], ["1", "2"])
            with self.assertRaises(ValueError):
                board.remove_participant("1")
            board.remove_participant("2")
            self.assertEqual([p.name for p in board.participants], ["You"])

    def test_corrupt_storage_shows_load_error(self):
        self.path.write_text("{not json", encoding="utf-8")
        with AvailabilityBoard(LocalBackend(LocalStorage(self.path)), bus=EventBus()) as board:
            self.assertEqual(board.error, MSG_LOAD_FAILED)
            self.assertEqual(len(board.weeks), 4)


if __name__ == '__main__':
    unittest.main()
