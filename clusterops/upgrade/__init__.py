"""Kubernetes upgrade path management."""

from .advisor import UpgradeAdvisor

__all__ = ["UpgradeAdvisor"]
