# backend/services/status_catalog.py
"""Static tables for the manufacturer funnel and the public status vocabulary.

The funnel is the fine-grained production stage a manufacturer moves a job
through. Every funnel state maps to exactly one public status, which is what
ops and customers see on the parent manufacturing record. Legality of a
transition is answered from TRANSITIONS alone; adding a state or a branch
is a change to these tables, not to the validator.
"""
from typing import Dict, List, Optional, Tuple

from utils.exceptions import InvalidTransitionError

# Forward order of the funnel. `samples_revise` sits outside it as a branch.
FUNNEL_ORDER: Tuple[str, ...] = (
    "intake_pending",
    "specs_lock_review",
    "specs_locked",
    "materials_reserved",
    "samples_in_progress",
    "samples_awaiting_approval",
    "samples_approved",
    "bulk_cutting",
    "bulk_print_emb_sublim",
    "bulk_stitching",
    "bulk_qc",
    "packing_complete",
    "handed_to_carrier",
    "delivered_confirmed",
)

# state -> (label, color, zone, display order, public status)
FUNNEL_STATES: Dict[str, Tuple[str, str, str, int, str]] = {
    "intake_pending": ("Intake Pending", "#f59e0b", "intake", 1, "awaiting_admin_confirmation"),
    "specs_lock_review": ("Specs Lock Review", "#f59e0b", "intake", 2, "awaiting_admin_confirmation"),
    "specs_locked": ("Specs Locked", "#3b82f6", "specs", 3, "confirmed_awaiting_manufacturing"),
    "materials_reserved": ("Materials Reserved", "#3b82f6", "specs", 4, "confirmed_awaiting_manufacturing"),
    "samples_in_progress": ("Samples In Progress", "#8b5cf6", "samples", 5, "confirmed_awaiting_manufacturing"),
    "samples_awaiting_approval": ("Samples Awaiting Approval", "#8b5cf6", "samples", 6,
                                  "confirmed_awaiting_manufacturing"),
    "samples_approved": ("Samples Approved", "#22c55e", "samples", 7, "confirmed_awaiting_manufacturing"),
    "samples_revise": ("Samples Revise", "#ef4444", "samples", 8, "confirmed_awaiting_manufacturing"),
    "bulk_cutting": ("Bulk Cutting", "#ec4899", "production", 9, "cutting_sewing"),
    "bulk_print_emb_sublim": ("Bulk Print/Emb/Sublim", "#ec4899", "production", 10, "printing"),
    "bulk_stitching": ("Bulk Stitching", "#ec4899", "production", 11, "cutting_sewing"),
    "bulk_qc": ("Bulk QC", "#06b6d4", "production", 12, "final_packing_press"),
    "packing_complete": ("Packing Complete", "#06b6d4", "production", 13, "final_packing_press"),
    "handed_to_carrier": ("Handed to Carrier", "#10b981", "shipping", 14, "shipped"),
    "delivered_confirmed": ("Delivered Confirmed", "#22c55e", "shipping", 15, "complete"),
}

PUBLIC_STATUSES: Dict[str, str] = {
    "awaiting_admin_confirmation": "Awaiting Admin Confirmation",
    "confirmed_awaiting_manufacturing": "Confirmed, Awaiting Manufacturing",
    "cutting_sewing": "Cutting & Sewing",
    "printing": "Printing",
    "final_packing_press": "Final Packing & Press",
    "shipped": "Shipped",
    "complete": "Complete",
}

EVENT_TYPES: Tuple[str, ...] = (
    "status_change",
    "spec_update",
    "pantone_update",
    "sample_approved",
    "sample_rejected",
    "deadline_changed",
    "note_added",
    "attachment_added",
    "shipment_created",
    "shipment_split",
    "issue_flagged",
    "issue_resolved",
)

PRINT_METHODS: Tuple[str, ...] = (
    "screen", "plastisol", "water_based", "sublimation", "embroidery", "dtg", "other",
)

PRIORITIES: Tuple[str, ...] = ("low", "normal", "high", "urgent")


def _build_transitions() -> Dict[str, frozenset]:
    table = {}
    for current, nxt in zip(FUNNEL_ORDER, FUNNEL_ORDER[1:]):
        table[current] = {nxt}
    table["delivered_confirmed"] = set()
    table["samples_awaiting_approval"].add("samples_revise")
    table["samples_revise"] = {"samples_in_progress"}
    return {state: frozenset(targets) for state, targets in table.items()}


# Adjacency map: state -> states reachable in one step (same-state requests excluded)
TRANSITIONS: Dict[str, frozenset] = _build_transitions()


def is_known_state(state: Optional[str]) -> bool:
    return state in FUNNEL_STATES


def is_valid_transition(current: Optional[str], requested: Optional[str]) -> bool:
    """True when `requested` equals a known `current` or is one of its successors."""
    if not is_known_state(current) or not is_known_state(requested):
        return False
    if current == requested:
        return True
    return requested in TRANSITIONS[current]


def allowed_transitions(current: str) -> List[str]:
    targets = TRANSITIONS.get(current, frozenset())
    return sorted(targets, key=lambda s: FUNNEL_STATES[s][3])


def validate_transition(current: str, requested: str) -> None:
    if not is_valid_transition(current, requested):
        raise InvalidTransitionError(current, requested)


def public_status_for(funnel_status: str) -> str:
    return FUNNEL_STATES[funnel_status][4]


def label_for(funnel_status: str) -> str:
    meta = FUNNEL_STATES.get(funnel_status)
    return meta[0] if meta else funnel_status


def is_public_status(status: Optional[str]) -> bool:
    return status in PUBLIC_STATUSES


def portal_config() -> dict:
    """Everything a portal client needs to render the funnel board."""
    statuses = []
    for state, (label, color, zone, order, public) in sorted(FUNNEL_STATES.items(), key=lambda kv: kv[1][3]):
        statuses.append({
            "value": state,
            "label": label,
            "color": color,
            "zone": zone,
            "order": order,
            "publicStatus": public,
            "allowedTransitions": allowed_transitions(state),
        })
    return {
        "statuses": statuses,
        "publicStatuses": [{"value": k, "label": v} for k, v in PUBLIC_STATUSES.items()],
        "eventTypes": list(EVENT_TYPES),
        "printMethods": list(PRINT_METHODS),
        "priorities": list(PRIORITIES),
    }
