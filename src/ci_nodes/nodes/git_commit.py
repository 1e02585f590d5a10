"""Commit node."""

from ci_nodes.constants import KEY_HASH, KEY_WORK_DIR, NODE_GIT_COMMIT
from ci_nodes.git.operations import commit_changes
from ci_nodes.models.config import GitCommitConfig
from ci_nodes.models.message import RuleMsg
from ci_nodes.nodes.base import BaseGitNode
from ci_nodes.nodes.registry import register_node


@register_node
class GitCommitNode(BaseGitNode):
    """Stage files matching a pattern and commit them; writes the commit hash to ``hash``."""

    node_type = NODE_GIT_COMMIT
    config_model = GitCommitConfig
    config: GitCommitConfig

    def process(self, msg: RuleMsg) -> None:
        env = self.environment(msg)
        work_dir = self.get_work_dir(msg, env)
        msg.put_metadata(KEY_WORK_DIR, work_dir)

        commit_hash = commit_changes(
            work_dir,
            pattern=self.resolve(self.config.pattern, env),
            message=self.resolve(self.config.message, env),
            author_name=self.resolve(self.config.signature.author_name, env),
            author_email=self.resolve(self.config.signature.author_email, env),
        )
        msg.put_metadata(KEY_HASH, commit_hash)
