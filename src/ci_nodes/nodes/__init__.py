"""Rule chain nodes. Importing this package registers every node type."""

from ci_nodes.nodes.base import BaseGitNode, Node
from ci_nodes.nodes.git_clone import GitCloneNode
from ci_nodes.nodes.git_commit import GitCommitNode
from ci_nodes.nodes.git_create_tag import GitCreateTagNode
from ci_nodes.nodes.git_log import GitLogNode
from ci_nodes.nodes.git_push import GitPushNode
from ci_nodes.nodes.ps import PsNode
from ci_nodes.nodes.registry import create_node, register_node, registered_types

__all__ = [
    "Node",
    "BaseGitNode",
    "GitCloneNode",
    "GitCommitNode",
    "GitCreateTagNode",
    "GitLogNode",
    "GitPushNode",
    "PsNode",
    "create_node",
    "register_node",
    "registered_types",
]
