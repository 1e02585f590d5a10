"""Git authentication, transport and operation execution."""

from ci_nodes.git.auth import AuthType, BasicAuth, ResolvedAuth, SshKeyAuth, select_auth_method
from ci_nodes.git.operations import (
    clone_or_pull,
    commit_changes,
    create_tag,
    open_repository,
    push,
    query_log,
)
from ci_nodes.git.transport import derive_work_dir, git_environment, repo_name, short_ref

__all__ = [
    "AuthType",
    "BasicAuth",
    "SshKeyAuth",
    "ResolvedAuth",
    "select_auth_method",
    "clone_or_pull",
    "commit_changes",
    "create_tag",
    "open_repository",
    "push",
    "query_log",
    "derive_work_dir",
    "git_environment",
    "repo_name",
    "short_ref",
]
