"""Helpers for rolling out special-resource driver stacks on Kubernetes clusters."""

__version__ = "0.1.0"