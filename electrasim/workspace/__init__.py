"""Workspace: entity model, copy-on-write store and assignment policy."""

from .models import (
    AssignmentMode, SessionMode, OutcomeStatus, RejectReason, Outcome,
    Entity, Connection, PinConflict, Snapshot,
)
from .policy import (
    PolicyResult,
    next_free_pin, next_controller_label, default_assignment,
    place, reassign_pin, reassign_owner, delete, connect, disconnect, pin_conflicts,
)
from .serialization import (
    entity_to_dict, connection_to_dict, snapshot_to_dict,
    conflicts_to_list, parse_snapshot,
)

__all__ = [
    # Models
    "AssignmentMode", "SessionMode", "OutcomeStatus", "RejectReason", "Outcome",
    "Entity", "Connection", "PinConflict", "Snapshot",
    # Policy
    "PolicyResult",
    "next_free_pin", "next_controller_label", "default_assignment",
    "place", "reassign_pin", "reassign_owner", "delete", "connect", "disconnect", "pin_conflicts",
    # Serialization
    "entity_to_dict", "connection_to_dict", "snapshot_to_dict",
    "conflicts_to_list", "parse_snapshot",
]
