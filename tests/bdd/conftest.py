"""Shared BDD fixtures and steps."""

import pytest
from pytest_bdd import parsers, then

from ci_nodes.context import RecordingContext


@pytest.fixture
def node_state() -> dict:
    """Shared node, messages and context storage."""
    return {"node": None, "messages": [], "ctx": RecordingContext()}


@then("the node reports success")
def node_succeeded(node_state: dict) -> None:
    """Verify the last run succeeded."""
    outcome = node_state["ctx"].last
    assert outcome is not None
    assert outcome.success, outcome.error


@then(parsers.parse('the node reports failure with "{error_type}"'))
def node_failed(node_state: dict, error_type: str) -> None:
    """Verify the last run failed with the given error type."""
    outcome = node_state["ctx"].last
    assert outcome is not None
    assert not outcome.success
    assert outcome.error_type == error_type
