"""Error taxonomy for node operations.

Every error a node reports through ``RuleContext.tell_failure`` derives from
``NodeError``. Lower-level GitPython errors are wrapped at the executor
boundary so callers only ever see these types.
"""


class NodeError(Exception):
    """Base exception for node errors."""

    def __init__(self, message: str, node_type: str = ""):
        self.node_type = node_type
        super().__init__(message)


class ConfigResolutionError(NodeError):
    """A required field resolved to an unusable value."""


class UnsupportedAuthType(NodeError):
    """Authentication type tag is not one of the known variants."""

    def __init__(self, auth_type: str, node_type: str = ""):
        self.auth_type = auth_type
        super().__init__(f"unsupported authType={auth_type!r}", node_type)


class RepositoryOpenError(NodeError):
    """Work directory does not hold a usable repository."""


class NoChangesToCommit(NodeError):
    """Working tree is clean, nothing to commit."""

    def __init__(self, work_dir: str = "", node_type: str = ""):
        self.work_dir = work_dir
        super().__init__("no changes to commit", node_type)


class TransportError(NodeError):
    """Clone, pull or push failed in the network/auth layer."""


class GitOperationError(NodeError):
    """A local git command (stage, commit, tag, history walk) failed."""


class MetricCollectionError(Exception):
    """A single host metric could not be collected."""

    def __init__(self, option: str, cause: Exception):
        self.option = option
        self.cause = cause
        super().__init__(f"failed to collect {option}: {cause}")
