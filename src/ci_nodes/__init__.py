"""Pluggable rule-chain nodes for git automation and host metrics."""

__version__ = "1.0.0"
