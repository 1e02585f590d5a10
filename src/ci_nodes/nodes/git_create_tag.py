"""Create tag node."""

from ci_nodes.constants import KEY_HASH, KEY_WORK_DIR, NODE_GIT_CREATE_TAG
from ci_nodes.git.operations import create_tag
from ci_nodes.models.config import GitCreateTagConfig
from ci_nodes.models.message import RuleMsg
from ci_nodes.nodes.base import BaseGitNode
from ci_nodes.nodes.registry import register_node


@register_node
class GitCreateTagNode(BaseGitNode):
    """Create an annotated tag at HEAD; writes the tag object hash to ``hash``."""

    node_type = NODE_GIT_CREATE_TAG
    config_model = GitCreateTagConfig
    config: GitCreateTagConfig

    def process(self, msg: RuleMsg) -> None:
        env = self.environment(msg)
        work_dir = self.get_work_dir(msg, env)
        msg.put_metadata(KEY_WORK_DIR, work_dir)

        tag = self.require(self.resolve(self.config.tag, env), "tag")
        # An annotated tag needs a message
        message = self.require(self.resolve(self.config.message, env), "message")

        tag_hash = create_tag(
            work_dir,
            tag,
            message,
            tagger_name=self.resolve(self.config.signature.author_name, env),
            tagger_email=self.resolve(self.config.signature.author_email, env),
        )
        msg.put_metadata(KEY_HASH, tag_hash)
