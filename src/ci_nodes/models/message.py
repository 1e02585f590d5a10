"""Rule message exchanged between the caller and nodes."""

import time
import uuid
from enum import Enum

from pydantic import BaseModel, Field


class DataType(str, Enum):
    """Encoding of the message body."""

    JSON = "JSON"
    TEXT = "TEXT"
    BINARY = "BINARY"


class RuleMsg(BaseModel):
    """A unit of work handed to a node: body plus call-scoped metadata."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Message id")
    ts: int = Field(
        default_factory=lambda: int(time.time() * 1000), description="Creation time, epoch ms"
    )
    type: str = Field(default="", description="Message type")
    data_type: DataType = Field(default=DataType.JSON)
    data: str = Field(default="", description="Message body")
    metadata: dict[str, str] = Field(default_factory=dict, description="Call-scoped metadata")

    def get_metadata(self, key: str) -> str:
        """Return a metadata value, or "" when the key is absent."""
        return self.metadata.get(key, "")

    def put_metadata(self, key: str, value: str) -> None:
        self.metadata[key] = value
