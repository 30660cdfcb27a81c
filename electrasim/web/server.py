"""
FastAPI web server: JSON API over a single in-memory design session.

Every mutating endpoint answers with the outcome plus the full board
state (components, sketches, conflicts), so the UI can re-render from a
single response.
"""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from electrasim import __version__
from electrasim.catalog import ComponentKind, catalog_to_dict
from electrasim.config import load_settings
from electrasim.firmware import generate_pin_assignment_report
from electrasim.llm import CircuitValidator, ValidationResult, make_client
from electrasim.pins import PIN_DOMAIN
from electrasim.session import DesignSession
from electrasim.workspace import (
    AssignmentMode, Connection, Outcome, OutcomeStatus, RejectReason,
    conflicts_to_list, snapshot_to_dict,
)

log = logging.getLogger("electrasim.server")

settings = load_settings()

# ── App ────────────────────────────────────────────────────────────

app = FastAPI(title="ElectraSim", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Session state (persists across requests) ───────────────────────

_session = DesignSession.with_demo_board(
    settings.assignment_mode, strict_pins=settings.strict_pins)


def get_session() -> DesignSession:
    return _session


def get_validator() -> CircuitValidator:
    return CircuitValidator(make_client(settings))


# ── Models ─────────────────────────────────────────────────────────

class PlaceRequest(BaseModel):
    type: str
    x: float = 0.0
    y: float = 0.0
    value: str | None = None


class PositionUpdate(BaseModel):
    x: float
    y: float


class PinUpdate(BaseModel):
    pin: int | None


class OwnerUpdate(BaseModel):
    owner_id: str | None


class ValueUpdate(BaseModel):
    value: str | None


class ConnectionRequest(BaseModel):
    from_id: str
    from_terminal: str
    to_id: str
    to_terminal: str


class PressRequest(BaseModel):
    id: str
    pressed: bool


class ResetRequest(BaseModel):
    mode: str | None = None
    strict_pins: bool | None = None
    demo: bool = True


# ── Helpers ────────────────────────────────────────────────────────

def _state(sess: DesignSession) -> dict:
    return {
        "assignment_mode": sess.mode.value,
        "strict_pins": sess.strict_pins,
        "simulating": sess.simulating,
        "revision": sess.revision,
        "pins": list(PIN_DOMAIN),
        **snapshot_to_dict(sess.snapshot),
        "sketches": sess.sketches,
        "conflicts": conflicts_to_list(sess.pin_conflicts()),
        "led_states": sess.led_states,
    }


def _respond(sess: DesignSession, outcome: Outcome, entity_id: str | None = None) -> dict:
    """Map an Outcome to a response body or an HTTP error."""
    if outcome.rejected:
        code = 409 if outcome.reason is RejectReason.SIMULATION_ACTIVE else 422
        raise HTTPException(code, outcome.reason.value)
    if not outcome.applied and entity_id is not None and entity_id not in sess.snapshot:
        raise HTTPException(404, f"Component '{entity_id}' not found.")
    return {
        "status": outcome.status.value,
        "id": outcome.entity_id,
        "state": _state(sess),
    }


# ── Routes ─────────────────────────────────────────────────────────

@app.get("/")
def index():
    return {"name": "ElectraSim", "version": __version__}


@app.get("/api/catalog")
def get_catalog():
    return catalog_to_dict()


@app.get("/api/state")
def get_state(sess: DesignSession = Depends(get_session)):
    return _state(sess)


@app.post("/api/reset")
def reset_session(req: ResetRequest | None = None):
    """Discard the board and start a fresh session."""
    global _session
    req = req or ResetRequest()
    mode = settings.assignment_mode
    if req.mode:
        try:
            mode = AssignmentMode.parse(req.mode)
        except ValueError as e:
            raise HTTPException(400, str(e))
    strict = settings.strict_pins if req.strict_pins is None else req.strict_pins

    if req.demo:
        _session = DesignSession.with_demo_board(mode, strict_pins=strict)
    else:
        _session = DesignSession(mode, strict_pins=strict)
    log.info("Session reset (mode=%s, strict=%s, demo=%s)", mode.value, strict, req.demo)
    return {"status": "ok", "state": _state(_session)}


@app.post("/api/components")
def place_component(req: PlaceRequest, sess: DesignSession = Depends(get_session)):
    try:
        kind = ComponentKind.parse(req.type)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return _respond(sess, sess.place(kind, req.x, req.y, value=req.value))


@app.patch("/api/components/{entity_id}/position")
def move_component(entity_id: str, req: PositionUpdate,
                   sess: DesignSession = Depends(get_session)):
    return _respond(sess, sess.move(entity_id, req.x, req.y), entity_id)


@app.patch("/api/components/{entity_id}/pin")
def update_pin(entity_id: str, req: PinUpdate,
               sess: DesignSession = Depends(get_session)):
    return _respond(sess, sess.set_pin(entity_id, req.pin), entity_id)


@app.patch("/api/components/{entity_id}/owner")
def update_owner(entity_id: str, req: OwnerUpdate,
                 sess: DesignSession = Depends(get_session)):
    return _respond(sess, sess.set_owner(entity_id, req.owner_id), entity_id)


@app.patch("/api/components/{entity_id}/value")
def update_value(entity_id: str, req: ValueUpdate,
                 sess: DesignSession = Depends(get_session)):
    return _respond(sess, sess.set_value(entity_id, req.value), entity_id)


@app.delete("/api/components/{entity_id}")
def delete_component(entity_id: str, sess: DesignSession = Depends(get_session)):
    return _respond(sess, sess.delete(entity_id), entity_id)


@app.post("/api/connections")
def add_connection(req: ConnectionRequest, sess: DesignSession = Depends(get_session)):
    for eid in (req.from_id, req.to_id):
        if eid not in sess.snapshot:
            raise HTTPException(404, f"Component '{eid}' not found.")
    conn = Connection(
        from_id=req.from_id,
        from_terminal=req.from_terminal,
        to_id=req.to_id,
        to_terminal=req.to_terminal,
    )
    return _respond(sess, sess.connect(conn))


@app.delete("/api/connections")
def remove_connection(req: ConnectionRequest, sess: DesignSession = Depends(get_session)):
    conn = Connection(
        from_id=req.from_id,
        from_terminal=req.from_terminal,
        to_id=req.to_id,
        to_terminal=req.to_terminal,
    )
    outcome = sess.disconnect(conn)
    if outcome.status is OutcomeStatus.NOOP:
        raise HTTPException(404, "Connection not found.")
    return _respond(sess, outcome)


@app.get("/api/sketches")
def get_sketches(sess: DesignSession = Depends(get_session)):
    return {"revision": sess.revision, "sketches": sess.sketches}


@app.get("/api/sketches/{sketch_id}", response_class=PlainTextResponse)
def get_sketch(sketch_id: str, sess: DesignSession = Depends(get_session)):
    """Plain sketch text, ready to paste into the Arduino IDE."""
    if sketch_id not in sess.sketches:
        raise HTTPException(404, f"No sketch for '{sketch_id}'.")
    return sess.sketches[sketch_id]


@app.get("/api/report", response_class=PlainTextResponse)
def get_report(sess: DesignSession = Depends(get_session)):
    return generate_pin_assignment_report(sess.snapshot, sess.mode)


@app.post("/api/simulation/start")
def start_simulation(sess: DesignSession = Depends(get_session)):
    changed = sess.start_simulation()
    return {"status": "started" if changed else "noop", "simulating": sess.simulating}


@app.post("/api/simulation/stop")
def stop_simulation(sess: DesignSession = Depends(get_session)):
    changed = sess.stop_simulation()
    return {"status": "stopped" if changed else "noop", "simulating": sess.simulating}


@app.post("/api/simulation/press")
def press(req: PressRequest, sess: DesignSession = Depends(get_session)):
    """Button press / release while simulating; returns the LED it drives."""
    if not sess.simulating:
        raise HTTPException(409, "Simulation is not running.")
    signal = sess.press(req.id, req.pressed)
    if signal is None:
        return {"led": None}
    return {"led": {"id": signal.led_id, "on": signal.on}}


@app.post("/api/validate", response_model=ValidationResult)
def validate_circuit(
    sess: DesignSession = Depends(get_session),
    validator: CircuitValidator = Depends(get_validator),
):
    return sess.validate(validator)


# ── Entry point ────────────────────────────────────────────────────

def main(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn
    uvicorn.run("electrasim.web.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main(host=settings.host, port=settings.port)
