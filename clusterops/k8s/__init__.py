"""Kubernetes interaction module."""

from .client import K8sClient
from .pods import is_pod_running, summarize_pods

__all__ = ["K8sClient", "is_pod_running", "summarize_pods"]
