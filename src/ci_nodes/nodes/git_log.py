"""Log query node."""

from ci_nodes.constants import KEY_WORK_DIR, NODE_GIT_LOG
from ci_nodes.git.operations import parse_time_bound, query_log
from ci_nodes.models.config import GitLogConfig
from ci_nodes.models.message import DataType, RuleMsg
from ci_nodes.models.results import dump_log_entries
from ci_nodes.nodes.base import BaseGitNode
from ci_nodes.nodes.registry import register_node


@register_node
class GitLogNode(BaseGitNode):
    """Replace the message body with a JSON array of log entries, newest first.

    ``startTime``/``endTime`` bound the committer time (a bare date covers the
    whole day) and ``limit`` caps the number of entries, 0 meaning no cap.
    """

    node_type = NODE_GIT_LOG
    config_model = GitLogConfig
    config: GitLogConfig

    def process(self, msg: RuleMsg) -> None:
        env = self.environment(msg)
        work_dir = self.get_work_dir(msg, env)
        msg.put_metadata(KEY_WORK_DIR, work_dir)

        start = parse_time_bound(self.resolve(self.config.start_time, env))
        end = parse_time_bound(self.resolve(self.config.end_time, env), end_of_day=True)

        entries = query_log(work_dir, limit=self.config.limit, start=start, end=end)
        msg.data_type = DataType.JSON
        msg.data = dump_log_entries(entries)
