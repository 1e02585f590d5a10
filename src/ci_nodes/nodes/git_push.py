"""Push node."""

from ci_nodes.constants import KEY_WORK_DIR, NODE_GIT_PUSH
from ci_nodes.git.operations import push
from ci_nodes.models.message import RuleMsg
from ci_nodes.nodes.base import BaseGitNode
from ci_nodes.nodes.registry import register_node


@register_node
class GitPushNode(BaseGitNode):
    """Push the configured refspecs to the resolved repository URL."""

    node_type = NODE_GIT_PUSH

    def process(self, msg: RuleMsg) -> None:
        env = self.environment(msg)
        ref_specs = self.get_ref_specs(msg, env)
        work_dir = self.get_work_dir(msg, env)
        msg.put_metadata(KEY_WORK_DIR, work_dir)
        repository = self.require(self.get_repository(msg, env), "repository")

        auth = self.get_auth_method()
        push(
            work_dir,
            repository,
            ref_specs,
            auth=auth,
            proxy=self.get_proxy(),
            attempts=self.git_config.retry_attempts,
        )
