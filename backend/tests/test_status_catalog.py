import pytest

from services import status_catalog
from services.status_catalog import (
    FUNNEL_ORDER, FUNNEL_STATES, PUBLIC_STATUSES, is_valid_transition, public_status_for, validate_transition,
)
from utils.exceptions import InvalidTransitionError


@pytest.mark.parametrize("state", list(FUNNEL_STATES))
def test_same_state_is_always_valid(state):
    assert is_valid_transition(state, state)


@pytest.mark.parametrize("current,nxt", list(zip(FUNNEL_ORDER, FUNNEL_ORDER[1:])))
def test_adjacent_forward_transition_is_valid(current, nxt):
    assert is_valid_transition(current, nxt)


def test_skipping_ahead_is_invalid():
    for i, current in enumerate(FUNNEL_ORDER):
        for requested in FUNNEL_ORDER[i + 2:]:
            assert not is_valid_transition(current, requested), (current, requested)


def test_moving_backwards_is_invalid():
    for i, current in enumerate(FUNNEL_ORDER):
        for requested in FUNNEL_ORDER[:i]:
            assert not is_valid_transition(current, requested), (current, requested)


def test_samples_revise_branch():
    assert is_valid_transition("samples_awaiting_approval", "samples_revise")
    targets = [s for s in FUNNEL_STATES if s != "samples_revise" and is_valid_transition("samples_revise", s)]
    assert targets == ["samples_in_progress"]


def test_delivered_confirmed_is_terminal():
    assert status_catalog.allowed_transitions("delivered_confirmed") == []


def test_unknown_states_are_invalid():
    assert not is_valid_transition("intake_pending", "teleported")
    assert not is_valid_transition("teleported", "intake_pending")
    assert not is_valid_transition("teleported", "teleported")
    assert not is_valid_transition(None, "intake_pending")


def test_every_state_maps_to_a_public_status():
    for state in FUNNEL_STATES:
        assert public_status_for(state) in PUBLIC_STATUSES


def test_public_status_mapping():
    assert public_status_for("intake_pending") == "awaiting_admin_confirmation"
    assert public_status_for("specs_lock_review") == "awaiting_admin_confirmation"
    assert public_status_for("samples_revise") == "confirmed_awaiting_manufacturing"
    assert public_status_for("bulk_cutting") == "cutting_sewing"
    assert public_status_for("bulk_stitching") == "cutting_sewing"
    assert public_status_for("bulk_print_emb_sublim") == "printing"
    assert public_status_for("bulk_qc") == "final_packing_press"
    assert public_status_for("packing_complete") == "final_packing_press"
    assert public_status_for("handed_to_carrier") == "shipped"
    assert public_status_for("delivered_confirmed") == "complete"


def test_validate_transition_names_both_states():
    with pytest.raises(InvalidTransitionError) as exc_info:
        validate_transition("intake_pending", "bulk_qc")

    err = exc_info.value
    assert err.status_code == 400
    assert err.context == {"currentStatus": "intake_pending", "requestedStatus": "bulk_qc"}
    assert "intake_pending" in err.message and "bulk_qc" in err.message


def test_validate_transition_accepts_valid_move():
    assert validate_transition("bulk_qc", "packing_complete") is None


def test_portal_config_lists_statuses_in_display_order():
    config = status_catalog.portal_config()

    orders = [s["order"] for s in config["statuses"]]
    assert orders == sorted(orders)
    assert len(config["statuses"]) == 15
    first = config["statuses"][0]
    assert first == {
        "value": "intake_pending",
        "label": "Intake Pending",
        "color": "#f59e0b",
        "zone": "intake",
        "order": 1,
        "publicStatus": "awaiting_admin_confirmation",
        "allowedTransitions": ["specs_lock_review"],
    }
    assert "status_change" in config["eventTypes"]
    assert {p["value"] for p in config["publicStatuses"]} == set(PUBLIC_STATUSES)
