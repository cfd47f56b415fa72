"""Helpers for reading pod and node status from kubectl JSON."""

from typing import Any, Dict, Iterable, List, NamedTuple

HEALTHY_PHASES = {"Running", "Succeeded"}
FAILING_REASONS = {"CrashLoopBackOff", "ImagePullBackOff", "ErrImagePull", "Error"}


class PodSummary(NamedTuple):
    total: int
    running: int
    failing: List[str]


def pod_name(pod: Dict[str, Any]) -> str:
    metadata = pod.get("metadata", {})
    namespace = metadata.get("namespace")
    name = metadata.get("name", "")
    return f"{namespace}/{name}" if namespace else name


def pod_phase(pod: Dict[str, Any]) -> str:
    return pod.get("status", {}).get("phase", "Unknown")


def is_pod_running(pod: Dict[str, Any], allow_completed: bool = True) -> bool:
    """Check whether a pod counts as running."""
    phase = pod_phase(pod)
    if allow_completed:
        return phase in HEALTHY_PHASES
    return phase == "Running"


def failing_reason(pod: Dict[str, Any]) -> str:
    """Return the waiting/terminated reason that marks a pod as failing, or ''."""
    statuses = pod.get("status", {}).get("containerStatuses") or []
    for status in statuses:
        state = status.get("state", {})
        for key in ("waiting", "terminated"):
            reason = state.get(key, {}).get("reason")
            if reason in FAILING_REASONS:
                return reason
    return ""


def summarize_pods(pods: Iterable[Dict[str, Any]], allow_completed: bool = True) -> PodSummary:
    """Count running pods and name the ones in a failing state."""
    total = 0
    running = 0
    failing = []
    for pod in pods:
        total += 1
        if is_pod_running(pod, allow_completed):
            running += 1
        reason = failing_reason(pod)
        if reason:
            failing.append(f"{pod_name(pod)} ({reason})")
    return PodSummary(total=total, running=running, failing=failing)


def is_node_ready(node: Dict[str, Any]) -> bool:
    """Check the Ready condition of a node."""
    for condition in node.get("status", {}).get("conditions", []):
        if condition.get("type") == "Ready":
            return condition.get("status") == "True"
    return False
