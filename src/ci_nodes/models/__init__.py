"""Pydantic data models for nodes."""

from ci_nodes.models.config import (
    ChainConfig,
    GitCommitConfig,
    GitConnectionConfig,
    GitCreateTagConfig,
    GitLogConfig,
    LoggingConfig,
    NodeConfig,
    NodeDefinition,
    ProxyConfig,
    PsConfig,
    Signature,
)
from ci_nodes.models.message import DataType, RuleMsg
from ci_nodes.models.results import Committer, LogEntry, NodeOutcome, dump_log_entries

__all__ = [
    # Message
    "DataType",
    "RuleMsg",
    # Results
    "Committer",
    "LogEntry",
    "NodeOutcome",
    "dump_log_entries",
    # Config
    "NodeConfig",
    "ProxyConfig",
    "GitConnectionConfig",
    "Signature",
    "GitCommitConfig",
    "GitCreateTagConfig",
    "GitLogConfig",
    "PsConfig",
    "LoggingConfig",
    "NodeDefinition",
    "ChainConfig",
]
