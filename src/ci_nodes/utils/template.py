"""Template markers in configuration strings.

A configuration value such as ``${metadata.workDir}/build`` is rendered
against an environment built from the incoming message. Detection is a
cheap scan done once when a node is initialised; rendering happens per call
and has no side effects.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from ci_nodes.models.message import RuleMsg

_MARKER = re.compile(r"\$\{\s*([_a-zA-Z][_a-zA-Z0-9.\-]*)\s*\}")


def _lookup(env: Mapping[str, Any], key: str) -> Any:
    """Resolve ``a.b.c`` against nested mappings; raise KeyError when absent."""
    if key in env:
        return env[key]
    value: Any = env
    for part in key.split("."):
        if isinstance(value, Mapping) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            raise KeyError(key)
    return value


def _to_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if value is None:
        return ""
    return str(value)


def has_variable(value: str) -> bool:
    """Return True if ``value`` contains at least one substitution marker."""
    if not value or "${" not in value:
        return False
    return _MARKER.search(value) is not None


def render(value: str, env: Mapping[str, Any]) -> str:
    """Replace each marker with its bound value; unresolved markers stay verbatim.

    Examples:
        >>> render("${metadata.ref}", {"metadata": {"ref": "dev"}})
        'dev'
        >>> render("${missing}-x", {})
        '${missing}-x'
    """
    if not value:
        return value

    def substitute(match: re.Match[str]) -> str:
        try:
            return _to_text(_lookup(env, match.group(1)))
        except KeyError:
            return match.group(0)

    return _MARKER.sub(substitute, value)


def build_environment(msg: RuleMsg) -> dict[str, Any]:
    """Build the per-call environment from message metadata and body.

    Metadata keys are available at top level and under ``metadata``; the body
    is available raw as ``data`` and decoded as ``msg`` when it is JSON.
    """
    env: dict[str, Any] = dict(msg.metadata)
    try:
        body: Any = json.loads(msg.data) if msg.data else {}
    except ValueError:
        body = msg.data
    env.update(
        {
            "id": msg.id,
            "ts": msg.ts,
            "type": msg.type,
            "dataType": msg.data_type.value,
            "data": msg.data,
            "metadata": dict(msg.metadata),
            "msg": body,
        }
    )
    return env
