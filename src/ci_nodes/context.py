"""Rule context: how a node reports its outcome back to the caller."""

from typing import Protocol

from ci_nodes.constants import RELATION_FAILURE, RELATION_SUCCESS
from ci_nodes.models.message import RuleMsg
from ci_nodes.models.results import NodeOutcome


class RuleContext(Protocol):
    """Outcome sink supplied by whatever dispatches messages to nodes."""

    def tell_success(self, msg: RuleMsg) -> None: ...

    def tell_failure(self, msg: RuleMsg, error: Exception) -> None: ...


class RecordingContext:
    """Context that keeps every outcome it is told about."""

    def __init__(self) -> None:
        self.outcomes: list[NodeOutcome] = []

    def tell_success(self, msg: RuleMsg) -> None:
        self.outcomes.append(
            NodeOutcome(relation_type=RELATION_SUCCESS, msg=msg.model_copy(deep=True))
        )

    def tell_failure(self, msg: RuleMsg, error: Exception) -> None:
        self.outcomes.append(
            NodeOutcome(
                relation_type=RELATION_FAILURE,
                msg=msg.model_copy(deep=True),
                error=str(error),
                error_type=type(error).__name__,
            )
        )

    @property
    def last(self) -> NodeOutcome | None:
        """Most recent outcome, None before the first call."""
        return self.outcomes[-1] if self.outcomes else None
