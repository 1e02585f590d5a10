"""Host metrics node."""

import json
from typing import Any

from ci_nodes.constants import ALL_METRIC_OPTIONS, NODE_PS
from ci_nodes.metrics import collect_metrics
from ci_nodes.models.config import PsConfig
from ci_nodes.models.message import DataType, RuleMsg
from ci_nodes.nodes.base import Node
from ci_nodes.nodes.registry import register_node
from ci_nodes.utils.logging import get_logger

logger = get_logger(__name__)


@register_node
class PsNode(Node):
    """Replace the message body with a JSON snapshot of host metrics.

    Options (empty means all): host/info, cpu/info, cpu/percent,
    mem/virtualMemory, mem/swapMemory, disk/usage, disk/ioCounters,
    net/ioCounters, net/interfaces.
    """

    node_type = NODE_PS

    def init(self, configuration: dict[str, Any]) -> None:
        self.config = PsConfig.model_validate(configuration)
        unknown = [opt for opt in self.config.options if opt not in ALL_METRIC_OPTIONS]
        if unknown:
            logger.warning("Ignoring unknown metric options", options=unknown)

    def process(self, msg: RuleMsg) -> None:
        result = collect_metrics(self.config.options)
        msg.data_type = DataType.JSON
        msg.data = json.dumps(result, default=str)
