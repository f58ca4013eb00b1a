"""Session helpers that keep the shipping form state in Streamlit."""
from __future__ import annotations

from typing import Any, MutableMapping, Optional

import streamlit as st

from shipcalc.form_state import FormController, FormState
from shipcalc.search import ManualTimer

FORM_STATE_KEY = "shipping_form_state"


__all__ = [
    "FORM_STATE_KEY",
    "build_controller",
    "load_form_state",
    "location_widget_key",
    "save_form_state",
]


def _session(session: Optional[MutableMapping[str, Any]]) -> MutableMapping[str, Any]:
    return st.session_state if session is None else session


def load_form_state(session: Optional[MutableMapping[str, Any]] = None) -> FormState:
    """Return the stored ``FormState`` or a fresh default one."""

    data = _session(session).get(FORM_STATE_KEY)
    if not data:
        return FormState()
    return FormState.from_dict(data)


def save_form_state(
    state: FormState, session: Optional[MutableMapping[str, Any]] = None
) -> None:
    _session(session)[FORM_STATE_KEY] = state.to_dict()


def build_controller(session: Optional[MutableMapping[str, Any]] = None) -> FormController:
    """Return a controller over the session state that writes changes back.

    Streamlit reruns the script for every interaction, so suggestion lookups
    are deferred and run on the script thread when callers flush them.
    """

    store = _session(session)
    return FormController(
        load_form_state(store),
        delay=0.0,
        timer_factory=ManualTimer,
        on_change=lambda state: save_form_state(state, store),
    )


def location_widget_key(name: str) -> str:
    return f"shipping_{name}_text"
