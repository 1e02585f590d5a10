"""Registry of node types."""

from collections.abc import Mapping
from typing import Any, TypeVar

from ci_nodes.nodes.base import Node

_REGISTRY: dict[str, type[Node]] = {}

N = TypeVar("N", bound=type[Node])


def register_node(cls: N) -> N:
    """Class decorator registering a node under its ``node_type``."""
    if not cls.node_type:
        raise ValueError(f"{cls.__name__} has no node_type")
    _REGISTRY[cls.node_type] = cls
    return cls


def create_node(node_type: str, configuration: Mapping[str, Any] | None = None) -> Node:
    """
    Instantiate and initialise a registered node.

    Raises:
        ValueError: If the node type is not registered
        pydantic.ValidationError: If the configuration is invalid
    """
    try:
        cls = _REGISTRY[node_type]
    except KeyError:
        raise ValueError(f"unknown node type: {node_type}") from None
    return cls(configuration)


def registered_types() -> list[str]:
    return sorted(_REGISTRY)
