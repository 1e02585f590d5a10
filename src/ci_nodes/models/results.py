"""Outcome and payload models produced by nodes."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from ci_nodes.constants import RELATION_SUCCESS
from ci_nodes.models.message import RuleMsg


class Committer(BaseModel):
    """Identity and timestamp of an author or committer."""

    name: str = Field(description="Person name")
    email: str = Field(description="Email, not guaranteed to be well formed")
    when: datetime = Field(description="Signature timestamp")


class LogEntry(BaseModel):
    """One commit returned by a log query."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    hash: str = Field(description="Commit hash")
    author: Committer = Field(description="Original author of the change")
    committer: Committer = Field(description="Who recorded the change into history")
    merge_tag: str = Field(default="", description="Embedded tag of a signed-tag merge")
    message: str = Field(default="", description="Commit message")
    tree_hash: str = Field(description="Hash of the root tree")
    encoding: str = Field(default="", description="Commit message encoding")


LogEntryList = TypeAdapter(list[LogEntry])


def dump_log_entries(entries: list[LogEntry]) -> str:
    """Serialize log entries as a JSON array with camelCase keys."""
    return LogEntryList.dump_json(entries, by_alias=True).decode("utf-8")


class NodeOutcome(BaseModel):
    """Terminal result of one node invocation."""

    relation_type: str = Field(description="Success or Failure")
    msg: RuleMsg = Field(description="Message as it left the node")
    error: str | None = Field(default=None, description="Error description on failure")
    error_type: str | None = Field(default=None, description="Error class name on failure")

    @property
    def success(self) -> bool:
        return self.relation_type == RELATION_SUCCESS
