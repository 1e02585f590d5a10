"""Clone-or-pull node."""

from ci_nodes.constants import KEY_WORK_DIR, NODE_GIT_CLONE
from ci_nodes.git.operations import clone_or_pull, redact_url
from ci_nodes.models.message import RuleMsg
from ci_nodes.nodes.base import BaseGitNode
from ci_nodes.nodes.registry import register_node
from ci_nodes.utils.logging import get_logger

logger = get_logger(__name__)


@register_node
class GitCloneNode(BaseGitNode):
    """Clone the repository, or force-pull it when the work directory already exists.

    The resolved work directory is written to ``workDir`` metadata so later
    nodes can default to it. Pulling an up-to-date copy is a success.
    """

    node_type = NODE_GIT_CLONE

    def process(self, msg: RuleMsg) -> None:
        env = self.environment(msg)
        reference = self.get_reference(msg, env)
        work_dir = self.get_work_dir(msg, env)
        msg.put_metadata(KEY_WORK_DIR, work_dir)
        repository = self.require(self.get_repository(msg, env), "repository")

        auth = self.get_auth_method()
        outcome = clone_or_pull(
            repository,
            work_dir,
            reference,
            auth=auth,
            proxy=self.get_proxy(),
            attempts=self.git_config.retry_attempts,
        )
        logger.info(
            f"Repository synced: {outcome}",
            repository=redact_url(repository),
            work_dir=work_dir,
        )
