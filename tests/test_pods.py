"""Test pod and node status helpers."""

from clusterops.k8s.pods import is_node_ready, is_pod_running, pod_name, summarize_pods

from conftest import make_node, make_pod


def test_pod_name_includes_namespace():
    assert pod_name(make_pod("coredns-1", namespace="kube-system")) == "kube-system/coredns-1"


def test_completed_pods_count_as_running():
    pod = make_pod("job-1", phase="Succeeded")
    assert is_pod_running(pod)
    assert not is_pod_running(pod, allow_completed=False)


def test_summarize_pods_names_failing():
    pods = [
        make_pod("aws-node-1"),
        make_pod("aws-node-2", phase="Pending", reason="ImagePullBackOff"),
        make_pod("aws-node-3", phase="Running", reason="CrashLoopBackOff"),
    ]

    summary = summarize_pods(pods)

    assert summary.total == 3
    assert summary.running == 2
    assert summary.failing == [
        "kube-system/aws-node-2 (ImagePullBackOff)",
        "kube-system/aws-node-3 (CrashLoopBackOff)",
    ]


def test_node_ready():
    assert is_node_ready(make_node("a"))
    assert not is_node_ready(make_node("b", ready=False))
    assert not is_node_ready({"metadata": {"name": "c"}, "status": {}})
