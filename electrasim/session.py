"""
Design session: the single owner of the board state.

A session holds the current Snapshot, the assignment mode chosen when it
was created, and whether the user is designing or simulating.  Every
mutation goes through the session so that:

  - mutations are refused while simulating (REJECTED / SIMULATION_ACTIVE),
  - sketches are re-synthesized right after each applied change,
  - ``revision`` increases by one per applied change.

The web server calls into one session from its worker threads, so each
read-modify-commit runs under ``_lock``.

State lives in memory only; a new session starts from an empty board (or
the demo board).
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from electrasim.catalog import ComponentKind
from electrasim.firmware import synthesize
from electrasim.llm.validator import CircuitValidator, ValidationResult
from electrasim.simulation import LedSignal, resolve_activation
from electrasim.workspace import policy, store
from electrasim.workspace.models import (
    AssignmentMode, Connection, Outcome, PinConflict, RejectReason, SessionMode, Snapshot,
)

log = logging.getLogger("electrasim.session")


class DesignSession:
    """In-memory board plus its derived sketches."""

    def __init__(
        self,
        mode: AssignmentMode = AssignmentMode.PER_CONTROLLER,
        *,
        strict_pins: bool = False,
        snapshot: Snapshot | None = None,
    ) -> None:
        self.mode = mode
        self.strict_pins = strict_pins
        self.state = SessionMode.DESIGNING
        self.snapshot = snapshot if snapshot is not None else Snapshot()
        self.revision = 0
        self.led_states: dict[str, bool] = {}
        self.sketches: dict[str, str] = synthesize(self.snapshot, self.mode)
        self._lock = threading.RLock()

    @classmethod
    def with_demo_board(
        cls,
        mode: AssignmentMode = AssignmentMode.PER_CONTROLLER,
        *,
        strict_pins: bool = False,
    ) -> "DesignSession":
        """Session seeded with one controller, an LED on D12 and a button on D2."""
        sess = cls(mode, strict_pins=strict_pins)
        uno = sess.place(ComponentKind.CONTROLLER, 50, 150).entity_id
        led = sess.place(ComponentKind.LED, 550, 100).entity_id
        btn = sess.place(ComponentKind.BUTTON, 550, 300).entity_id
        sess.set_pin(btn, 2)
        sess.set_pin(led, 12)
        if mode is AssignmentMode.PER_CONTROLLER:
            sess.set_owner(led, uno)
            sess.set_owner(btn, uno)
        return sess

    # ── Queries ────────────────────────────────────────────────────

    @property
    def simulating(self) -> bool:
        return self.state is SessionMode.SIMULATING

    def pin_conflicts(self) -> list[PinConflict]:
        return policy.pin_conflicts(self.snapshot, self.mode)

    # ── Mutations ──────────────────────────────────────────────────

    def place(
        self,
        kind: ComponentKind,
        x: float,
        y: float,
        *,
        value: str | None = None,
    ) -> Outcome:
        with self._lock:
            if self.simulating:
                return self._rejected("place")
            snapshot, entity = policy.place(self.snapshot, kind, x, y, self.mode, value=value)
            self._commit(snapshot)
        log.info("Placed %s (pin=%s, owner=%s)", entity.id, entity.pin, entity.owner_id)
        return Outcome.ok(entity.id)

    def move(self, entity_id: str, x: float, y: float) -> Outcome:
        return self._apply_store(
            "move", entity_id, lambda s: store.update_fields(s, entity_id, x=x, y=y))

    def set_value(self, entity_id: str, value: str | None) -> Outcome:
        return self._apply_store(
            "set_value", entity_id, lambda s: store.update_fields(s, entity_id, value=value))

    def set_pin(self, entity_id: str, pin: int | None) -> Outcome:
        return self._apply_policy(
            "set_pin", entity_id,
            lambda s: policy.reassign_pin(s, entity_id, pin, self.mode, strict=self.strict_pins))

    def set_owner(self, entity_id: str, owner_id: str | None) -> Outcome:
        return self._apply_policy(
            "set_owner", entity_id,
            lambda s: policy.reassign_owner(
                s, entity_id, owner_id, self.mode, strict=self.strict_pins))

    def delete(self, entity_id: str) -> Outcome:
        return self._apply_policy("delete", entity_id, lambda s: policy.delete(s, entity_id))

    def connect(self, connection: Connection) -> Outcome:
        return self._apply_policy("connect", None, lambda s: policy.connect(s, connection))

    def disconnect(self, connection: Connection) -> Outcome:
        return self._apply_policy("disconnect", None, lambda s: policy.disconnect(s, connection))

    # ── Simulation ─────────────────────────────────────────────────

    def start_simulation(self) -> bool:
        """Enter SIMULATING.  Returns False if already simulating."""
        with self._lock:
            if self.simulating:
                return False
            self.state = SessionMode.SIMULATING
        log.info("Simulation started (revision %d)", self.revision)
        return True

    def stop_simulation(self) -> bool:
        """Return to DESIGNING.  Returns False if not simulating."""
        with self._lock:
            if not self.simulating:
                return False
            self.state = SessionMode.DESIGNING
            self.led_states.clear()
        log.info("Simulation stopped")
        return True

    def press(self, peripheral_id: str, pressed: bool) -> LedSignal | None:
        """Forward a button press / release; returns the LED it drives."""
        with self._lock:
            if not self.simulating:
                return None
            signal = resolve_activation(self.snapshot, peripheral_id, pressed, self.mode)
            if signal is not None:
                self.led_states[signal.led_id] = signal.on
        return signal

    # ── Validation ─────────────────────────────────────────────────

    def validate(self, validator: CircuitValidator) -> ValidationResult:
        return validator.validate(self.snapshot)

    # ── Internals ──────────────────────────────────────────────────

    def _commit(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot
        self.revision += 1
        self.sketches = synthesize(snapshot, self.mode)

    def _apply_policy(
        self,
        op: str,
        entity_id: str | None,
        fn: Callable[[Snapshot], policy.PolicyResult],
    ) -> Outcome:
        with self._lock:
            if self.simulating:
                return self._rejected(op, entity_id)
            snapshot, outcome = fn(self.snapshot)
            if outcome.applied:
                self._commit(snapshot)
                log.debug("%s applied to %s (revision %d)", op, outcome.entity_id, self.revision)
        if outcome.rejected:
            log.warning("%s on %s rejected: %s", op, outcome.entity_id, outcome.reason.value)
        return outcome

    def _apply_store(
        self,
        op: str,
        entity_id: str,
        fn: Callable[[Snapshot], Snapshot],
    ) -> Outcome:
        with self._lock:
            if self.simulating:
                return self._rejected(op, entity_id)
            snapshot = fn(self.snapshot)
            if snapshot is self.snapshot:
                return Outcome.noop(entity_id)
            self._commit(snapshot)
        return Outcome.ok(entity_id)

    def _rejected(self, op: str, entity_id: str | None = None) -> Outcome:
        log.warning("%s refused while simulating", op)
        return Outcome.reject(RejectReason.SIMULATION_ACTIVE, entity_id)
