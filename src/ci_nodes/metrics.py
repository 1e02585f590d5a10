"""Host metrics collection.

Each metric is collected independently; a collector that fails is logged and
left out of the snapshot instead of aborting it.
"""

import platform
import socket
import time
from collections.abc import Callable, Iterable
from typing import Any

import psutil

from ci_nodes.constants import (
    ALL_METRIC_OPTIONS,
    CPU_PERCENT_INTERVAL_SECONDS,
    OPTION_CPU_INFO,
    OPTION_CPU_PERCENT,
    OPTION_DISK_IO_COUNTERS,
    OPTION_DISK_USAGE,
    OPTION_HOST_INFO,
    OPTION_NET_INTERFACES,
    OPTION_NET_IO_COUNTERS,
    OPTION_SWAP_MEMORY,
    OPTION_VIRTUAL_MEMORY,
)
from ci_nodes.exceptions import MetricCollectionError
from ci_nodes.utils.logging import get_logger

logger = get_logger(__name__)


def _host_info() -> dict[str, Any]:
    boot_time = int(psutil.boot_time())
    uname = platform.uname()
    return {
        "hostname": socket.gethostname(),
        "uptime": int(time.time()) - boot_time,
        "bootTime": boot_time,
        "procs": len(psutil.pids()),
        "os": uname.system.lower(),
        "platform": platform.platform(),
        "kernelVersion": uname.release,
        "kernelArch": uname.machine,
    }


def _cpu_info() -> dict[str, Any]:
    freq = psutil.cpu_freq()
    return {
        "modelName": platform.processor() or platform.machine(),
        "logicalCores": psutil.cpu_count(logical=True),
        "physicalCores": psutil.cpu_count(logical=False),
        "frequency": freq._asdict() if freq is not None else None,
    }


def _cpu_percent() -> list[float]:
    # Blocks for the whole sampling window
    return [psutil.cpu_percent(interval=CPU_PERCENT_INTERVAL_SECONDS, percpu=False)]


def _virtual_memory() -> dict[str, Any]:
    return psutil.virtual_memory()._asdict()


def _swap_memory() -> dict[str, Any]:
    return psutil.swap_memory()._asdict()


def _disk_usage() -> list[dict[str, Any]]:
    usages = []
    for part in psutil.disk_partitions(all=True):
        try:
            usage = psutil.disk_usage(part.mountpoint)
        except (OSError, psutil.Error):
            # Pseudo filesystems and unmounted media
            continue
        usages.append({"path": part.mountpoint, "fstype": part.fstype, **usage._asdict()})
    return usages


def _disk_io_counters() -> list[dict[str, Any]]:
    counters = psutil.disk_io_counters(perdisk=True) or {}
    return [{"name": name, **stat._asdict()} for name, stat in counters.items()]


def _net_io_counters() -> list[dict[str, Any]]:
    counters = psutil.net_io_counters(pernic=True) or {}
    return [{"name": name, **stat._asdict()} for name, stat in counters.items()]


def _net_interfaces() -> list[dict[str, Any]]:
    stats = psutil.net_if_stats()
    interfaces = []
    for name, addrs in psutil.net_if_addrs().items():
        stat = stats.get(name)
        interfaces.append(
            {
                "name": name,
                "mtu": stat.mtu if stat else None,
                "isUp": stat.isup if stat else None,
                "addrs": [
                    {
                        "family": getattr(addr.family, "name", str(addr.family)),
                        "address": addr.address,
                    }
                    for addr in addrs
                ],
            }
        )
    return interfaces


COLLECTORS: dict[str, Callable[[], Any]] = {
    OPTION_HOST_INFO: _host_info,
    OPTION_CPU_INFO: _cpu_info,
    OPTION_CPU_PERCENT: _cpu_percent,
    OPTION_VIRTUAL_MEMORY: _virtual_memory,
    OPTION_SWAP_MEMORY: _swap_memory,
    OPTION_DISK_USAGE: _disk_usage,
    OPTION_DISK_IO_COUNTERS: _disk_io_counters,
    OPTION_NET_IO_COUNTERS: _net_io_counters,
    OPTION_NET_INTERFACES: _net_interfaces,
}


def collect_metric(option: str) -> Any:
    """
    Collect a single metric.

    Raises:
        KeyError: If the option is unknown
        MetricCollectionError: If the underlying collector fails
    """
    collector = COLLECTORS[option]
    try:
        return collector()
    except Exception as e:
        raise MetricCollectionError(option, e) from e


def collect_metrics(options: Iterable[str] = ()) -> dict[str, Any]:
    """
    Take a snapshot of the requested host metrics.

    Args:
        options: Metric option names; empty means every known metric

    Returns:
        Mapping of option name to value. Unknown or failed options are absent.
    """
    wanted = set(options)
    selected = [opt for opt in ALL_METRIC_OPTIONS if not wanted or opt in wanted]

    result: dict[str, Any] = {}
    for option in selected:
        try:
            result[option] = collect_metric(option)
        except MetricCollectionError as e:
            logger.warning("Metric collection failed", option=option, error=str(e.cause))

    logger.debug("Collected host metrics", options=list(result))
    return result
