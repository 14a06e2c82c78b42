"""Tests unitaires de la machine à états du statut."""

import pytest

from tutorhub.models.enums import RequestStatus
from tutorhub.services import state_machine


@pytest.mark.parametrize("current,new", [
    ("open", "in-progress"),
    ("open", "cancelled"),
    ("in-progress", "completed"),
    ("in-progress", "cancelled"),
])
def test_transitions_legales(current, new):
    assert state_machine.is_legal_transition(current, new)


@pytest.mark.parametrize("current,new", [
    ("open", "completed"),
    ("in-progress", "open"),
    ("completed", "open"),
    ("completed", "cancelled"),
    ("cancelled", "in-progress"),
])
def test_transitions_illegales(current, new):
    assert not state_machine.is_legal_transition(current, new)


@pytest.mark.parametrize("status", list(RequestStatus))
def test_meme_statut_toujours_permis(status):
    assert state_machine.is_legal_transition(status, status)


def test_edition_et_assignation_seulement_si_open():
    assert state_machine.can_edit_status("open")
    assert state_machine.can_assign(RequestStatus.OPEN)
    for status in ("in-progress", "completed", "cancelled"):
        assert not state_machine.can_edit_status(status)
        assert not state_machine.can_assign(status)


def test_statut_inconnu_leve_value_error():
    with pytest.raises(ValueError):
        state_machine.can_assign("archived")


def test_messages_de_statut():
    assert state_machine.status_message("open") == "Your request is now open and visible to tutors."
    assert state_machine.status_message("in-progress") == "Your request has been accepted and is in progress."
    assert state_machine.status_message("completed") == "Congratulations! Your request has been completed."
    assert state_machine.status_message(RequestStatus.CANCELLED) == "Your request has been cancelled."
