"""Tests for the assignment policy in both modes.

GLOBAL:
  - new peripherals take the lowest free pin, None once exhausted
  - reassignment onto a taken pin swaps with the holder (and only it)
  - pins stay unique through any sequence of placements and moves

PER_CONTROLLER:
  - new peripherals take the first domain pin and the first controller
  - reassignment never swaps; strict mode rejects same-owner clashes
  - owner changes keep the pin; unknown owners are rejected
  - deleting a controller detaches its peripherals
"""

from __future__ import annotations

import random
import unittest

from electrasim.catalog import ComponentKind
from electrasim.pins import PIN_DOMAIN
from electrasim.workspace import policy
from electrasim.workspace.models import (
    AssignmentMode, Connection, OutcomeStatus, RejectReason, Snapshot,
)
from tests.board_fixture import button, controller, led, make_two_board_snapshot

GLOBAL = AssignmentMode.GLOBAL
SCOPED = AssignmentMode.PER_CONTROLLER


def _pins(snapshot: Snapshot) -> list[int]:
    return [e.pin for e in snapshot.peripherals() if e.pin is not None]


class TestGlobalPlacement(unittest.TestCase):

    def test_first_led_gets_lowest_pin(self):
        snap, entity = policy.place(Snapshot(), ComponentKind.LED, 10, 20, GLOBAL)
        self.assertEqual(entity.pin, PIN_DOMAIN[0])
        self.assertIsNone(entity.owner_id)
        self.assertEqual(snap.get(entity.id), entity)

    def test_next_free_pin_skips_used(self):
        snap = Snapshot(entities=(led("l1", 2), led("l2", 4)))
        self.assertEqual(policy.next_free_pin(snap), 3)

    def test_exhausted_domain_gives_none(self):
        snap = Snapshot()
        for _ in PIN_DOMAIN:
            snap, _e = policy.place(snap, ComponentKind.BUTTON, 0, 0, GLOBAL)
        snap, extra = policy.place(snap, ComponentKind.LED, 0, 0, GLOBAL)
        self.assertIsNone(extra.pin)
        self.assertEqual(sorted(_pins(snap)), list(PIN_DOMAIN))

    def test_controller_has_no_pin(self):
        _snap, uno = policy.place(Snapshot(), ComponentKind.CONTROLLER, 0, 0, GLOBAL)
        self.assertIsNone(uno.pin)
        self.assertIsNone(uno.owner_id)
        self.assertEqual(uno.label, "A1")

    def test_default_values_from_catalog(self):
        _snap, res = policy.place(Snapshot(), ComponentKind.RESISTOR, 0, 0, GLOBAL)
        self.assertEqual(res.value, "220Ω")
        _snap, bat = policy.place(Snapshot(), ComponentKind.BATTERY, 0, 0, GLOBAL, value="3V")
        self.assertEqual(bat.value, "3V")

    def test_ids_are_unique(self):
        snap = Snapshot()
        for _ in range(50):
            snap, _e = policy.place(snap, ComponentKind.LED, 0, 0, GLOBAL)
        self.assertEqual(len(set(snap.ids())), 50)


class TestGlobalSwap(unittest.TestCase):

    def test_swap_with_holder(self):
        snap = Snapshot(entities=(led("A", 2), led("B", 3), button("C", 4)))
        result, outcome = policy.reassign_pin(snap, "A", 3, GLOBAL)
        self.assertEqual(outcome.status, OutcomeStatus.APPLIED)
        self.assertEqual(result.get("A").pin, 3)
        self.assertEqual(result.get("B").pin, 2)
        self.assertEqual(result.get("C").pin, 4)

    def test_free_pin_no_swap(self):
        snap = Snapshot(entities=(led("A", 2), led("B", 3)))
        result, _ = policy.reassign_pin(snap, "A", 7, GLOBAL)
        self.assertEqual(result.get("A").pin, 7)
        self.assertEqual(result.get("B").pin, 3)

    def test_swap_with_unpinned_entity(self):
        snap = Snapshot(entities=(led("A", None), led("B", 3)))
        result, _ = policy.reassign_pin(snap, "A", 3, GLOBAL)
        self.assertEqual(result.get("A").pin, 3)
        self.assertIsNone(result.get("B").pin)

    def test_same_pin_is_noop(self):
        snap = Snapshot(entities=(led("A", 2),))
        result, outcome = policy.reassign_pin(snap, "A", 2, GLOBAL)
        self.assertIs(result, snap)
        self.assertEqual(outcome.status, OutcomeStatus.NOOP)

    def test_invalid_pin_rejected(self):
        snap = Snapshot(entities=(led("A", 2),))
        result, outcome = policy.reassign_pin(snap, "A", 1, GLOBAL)
        self.assertIs(result, snap)
        self.assertEqual(outcome.reason, RejectReason.INVALID_PIN)

    def test_unknown_entity_is_noop(self):
        snap = Snapshot(entities=(led("A", 2),))
        result, outcome = policy.reassign_pin(snap, "ghost", 3, GLOBAL)
        self.assertIs(result, snap)
        self.assertEqual(outcome.status, OutcomeStatus.NOOP)

    def test_pins_stay_unique_under_random_operations(self):
        rng = random.Random(1234)
        kinds = [ComponentKind.LED, ComponentKind.BUTTON, ComponentKind.RESISTOR,
                 ComponentKind.CONTROLLER]
        snap = Snapshot()
        for _ in range(300):
            roll = rng.random()
            peripherals = snap.peripherals()
            if roll < 0.35 or not peripherals:
                snap, _e = policy.place(snap, rng.choice(kinds), 0, 0, GLOBAL)
            elif roll < 0.85:
                target = rng.choice(peripherals)
                snap, _o = policy.reassign_pin(snap, target.id, rng.choice(PIN_DOMAIN), GLOBAL)
            else:
                snap, _o = policy.delete(snap, rng.choice(snap.ids()))
            pins = _pins(snap)
            self.assertEqual(len(pins), len(set(pins)))
            self.assertEqual(policy.pin_conflicts(snap, GLOBAL), [])


class TestScopedPlacement(unittest.TestCase):

    def test_first_led_without_controller(self):
        _snap, entity = policy.place(Snapshot(), ComponentKind.LED, 0, 0, SCOPED)
        self.assertEqual(entity.pin, PIN_DOMAIN[0])
        self.assertIsNone(entity.owner_id)

    def test_defaults_to_first_controller(self):
        snap = Snapshot(entities=(controller("uno_a", "A1"), controller("uno_b", "A2")))
        _snap, entity = policy.place(snap, ComponentKind.BUTTON, 0, 0, SCOPED)
        self.assertEqual(entity.owner_id, "uno_a")
        self.assertEqual(entity.pin, PIN_DOMAIN[0])

    def test_no_uniqueness_check_on_insert(self):
        snap = Snapshot(entities=(controller("uno_a", "A1"),))
        snap, first = policy.place(snap, ComponentKind.LED, 0, 0, SCOPED)
        snap, second = policy.place(snap, ComponentKind.LED, 0, 0, SCOPED)
        self.assertEqual(first.pin, second.pin)

    def test_controller_labels_count_up(self):
        snap = Snapshot()
        snap, a1 = policy.place(snap, ComponentKind.CONTROLLER, 0, 0, SCOPED)
        snap, a2 = policy.place(snap, ComponentKind.CONTROLLER, 0, 0, SCOPED)
        self.assertEqual((a1.label, a2.label), ("A1", "A2"))

    def test_labels_not_renumbered_after_delete(self):
        snap = Snapshot()
        snap, a1 = policy.place(snap, ComponentKind.CONTROLLER, 0, 0, SCOPED)
        snap, a2 = policy.place(snap, ComponentKind.CONTROLLER, 0, 0, SCOPED)
        snap, _ = policy.delete(snap, a1.id)
        self.assertEqual(snap.get(a2.id).label, "A2")
        snap, a3 = policy.place(snap, ComponentKind.CONTROLLER, 0, 0, SCOPED)
        self.assertEqual(a3.label, "A2")


class TestScopedReassign(unittest.TestCase):

    def setUp(self):
        self.snap = make_two_board_snapshot()

    def test_set_pin_never_swaps(self):
        result, outcome = policy.reassign_pin(self.snap, "btn_a", 9, SCOPED)
        self.assertTrue(outcome.applied)
        self.assertEqual(result.get("btn_a").pin, 9)
        self.assertEqual(result.get("led_a").pin, 9)

    def test_duplicate_reported_as_conflict(self):
        result, _ = policy.reassign_pin(self.snap, "btn_a", 9, SCOPED)
        conflicts = policy.pin_conflicts(result, SCOPED)
        self.assertEqual(len(conflicts), 1)
        self.assertEqual(conflicts[0].pin, 9)
        self.assertEqual(conflicts[0].owner_id, "uno_a")
        self.assertEqual(conflicts[0].entity_ids, ("led_a", "btn_a"))

    def test_same_pin_different_owner_is_fine(self):
        # led_a (uno_a) and led_free (unowned) both sit on D9
        self.assertEqual(policy.pin_conflicts(self.snap, SCOPED), [])
        result, _ = policy.reassign_pin(self.snap, "led_b", 9, SCOPED)
        self.assertEqual(policy.pin_conflicts(result, SCOPED), [])

    def test_strict_rejects_same_owner_clash(self):
        result, outcome = policy.reassign_pin(self.snap, "btn_a", 9, SCOPED, strict=True)
        self.assertIs(result, self.snap)
        self.assertEqual(outcome.reason, RejectReason.PIN_CONFLICT)

    def test_strict_allows_other_owner(self):
        result, outcome = policy.reassign_pin(self.snap, "led_b", 9, SCOPED, strict=True)
        self.assertTrue(outcome.applied)
        self.assertEqual(result.get("led_b").pin, 9)

    def test_clear_pin(self):
        result, outcome = policy.reassign_pin(self.snap, "led_a", None, SCOPED)
        self.assertTrue(outcome.applied)
        self.assertIsNone(result.get("led_a").pin)

    def test_controller_pin_change_is_noop(self):
        result, outcome = policy.reassign_pin(self.snap, "uno_a", 5, SCOPED)
        self.assertIs(result, self.snap)
        self.assertEqual(outcome.status, OutcomeStatus.NOOP)

    def test_owner_change_keeps_pin(self):
        result, outcome = policy.reassign_owner(self.snap, "led_free", "uno_b", SCOPED)
        self.assertTrue(outcome.applied)
        self.assertEqual(result.get("led_free").owner_id, "uno_b")
        self.assertEqual(result.get("led_free").pin, 9)

    def test_owner_must_be_controller(self):
        result, outcome = policy.reassign_owner(self.snap, "led_free", "btn_a", SCOPED)
        self.assertIs(result, self.snap)
        self.assertEqual(outcome.reason, RejectReason.INVALID_OWNER)

    def test_detach_owner(self):
        result, _ = policy.reassign_owner(self.snap, "led_a", None, SCOPED)
        self.assertIsNone(result.get("led_a").owner_id)

    def test_strict_owner_change_into_clash(self):
        result, outcome = policy.reassign_owner(
            self.snap, "led_free", "uno_a", SCOPED, strict=True)
        self.assertIs(result, self.snap)
        self.assertEqual(outcome.reason, RejectReason.PIN_CONFLICT)

    def test_owner_ignored_in_global_mode(self):
        result, outcome = policy.reassign_owner(self.snap, "led_free", "uno_b", GLOBAL)
        self.assertIs(result, self.snap)
        self.assertEqual(outcome.status, OutcomeStatus.NOOP)


class TestDelete(unittest.TestCase):

    def test_delete_controller_cascades(self):
        snap = Snapshot(entities=(
            controller("C1", "A1"),
            button("b", 2, "C1"),
            led("l", 12, "C1"),
        ))
        owned_before = [e.id for e in snap.owned_by("C1")]
        result, outcome = policy.delete(snap, "C1")
        self.assertTrue(outcome.applied)
        self.assertNotIn("C1", result)
        for eid in owned_before:
            self.assertIsNone(result.get(eid).owner_id)

    def test_delete_unknown_is_noop(self):
        snap = make_two_board_snapshot()
        result, outcome = policy.delete(snap, "ghost")
        self.assertIs(result, snap)
        self.assertEqual(outcome.status, OutcomeStatus.NOOP)


class TestConnect(unittest.TestCase):

    def test_connect_valid_terminals(self):
        snap = make_two_board_snapshot()
        result, outcome = policy.connect(snap, Connection("led_a", "anode", "uno_a", "D9"))
        self.assertTrue(outcome.applied)
        self.assertEqual(len(result.connections), 1)

    def test_connect_unknown_terminal_rejected(self):
        snap = make_two_board_snapshot()
        result, outcome = policy.connect(snap, Connection("led_a", "gate", "uno_a", "D9"))
        self.assertIs(result, snap)
        self.assertEqual(outcome.reason, RejectReason.INVALID_TERMINAL)

    def test_disconnect(self):
        wire = Connection("led_a", "anode", "uno_a", "D9")
        snap, _ = policy.connect(make_two_board_snapshot(), wire)
        result, outcome = policy.disconnect(snap, wire)
        self.assertTrue(outcome.applied)
        self.assertEqual(result.connections, ())

    def test_disconnect_unknown_is_noop(self):
        snap = make_two_board_snapshot()
        result, outcome = policy.disconnect(snap, Connection("led_a", "anode", "uno_a", "D9"))
        self.assertIs(result, snap)
        self.assertEqual(outcome.status, OutcomeStatus.NOOP)


if __name__ == "__main__":
    unittest.main()
