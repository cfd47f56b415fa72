"""Cluster health validation."""

import time
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..aws import EksClient
from ..errors import ClusterOpsError
from ..k8s import K8sClient, summarize_pods
from ..k8s.pods import is_node_ready, pod_name, pod_phase
from ..model.backup import REQUIRED_ROLLBACK_FILES
from ..model.cluster import ResourceStatus
from ..model.options import ValidationType
from ..model.validation import ValidationResults
from ..utils.logger import get_logger
from .backup import DEFAULT_BACKUP_ROOT, latest_backup, missing_files

logger = get_logger(__name__)

SYSTEM_NAMESPACES = [
    "kube-system",
    "argocd",
    "monitoring",
    "ingress-nginx",
    "cert-manager",
    "external-dns",
]

ARGOCD_NAMESPACE = "argocd"
DNS_LOOKUP_TARGET = "kubernetes.default.svc.cluster.local"

ROLLBACK_PROCEDURE = [
    "Back up the current state before rolling back",
    "Review the changes to be rolled back against the backup",
    "Restore node group and add-on configuration from the backup files",
    "Validate the cluster after rollback",
]

Check = Callable[[ValidationResults], ValidationResults]


class ClusterValidator:
    """Runs independent health checks into a ValidationResults accumulator.

    Every check takes the accumulator, records exactly one outcome per
    probed item and returns it. No check reads another check's result.
    """

    def __init__(
        self,
        cluster_name: str,
        eks: Optional[EksClient] = None,
        k8s: Optional[K8sClient] = None,
        backup_root: Path = DEFAULT_BACKUP_ROOT,
        settle_seconds: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.cluster_name = cluster_name
        self.eks = eks
        self.k8s = k8s
        self.backup_root = Path(backup_root)
        self.settle_seconds = settle_seconds
        self.sleep = sleep

    def run(
        self,
        validation_type: ValidationType,
        backup_dir: Optional[Path] = None,
        results: Optional[ValidationResults] = None,
    ) -> ValidationResults:
        """Run the checklist for a validation scope."""
        results = results if results is not None else ValidationResults()
        logger.info(f"Running {validation_type.value} validation for {self.cluster_name}")

        if validation_type == ValidationType.ROLLBACK:
            return self.check_rollback_backup(results, backup_dir)

        if validation_type == ValidationType.POST_UPDATE and self.settle_seconds > 0:
            logger.info(f"Waiting {self.settle_seconds:.0f}s for cluster to stabilize...")
            self.sleep(self.settle_seconds)

        for check in self.checks_for(validation_type):
            results = self._run_check(check, results)

        logger.info(
            f"Validation finished: {results.passed} passed, "
            f"{results.warnings} warnings, {results.failed} failed"
        )
        return results

    def checks_for(self, validation_type: ValidationType) -> List[Check]:
        health = [
            self.check_control_plane,
            self.check_nodegroups,
            self.check_nodes,
            self.check_control_plane_components,
        ]
        standard = health + [
            self.check_system_pods,
            self.check_addons,
            self.check_vpc_cni,
            self.check_coredns,
            self.check_dns_resolution,
            self.check_ebs_csi,
            self.check_storage_classes,
        ]
        scopes: Dict[ValidationType, List[Check]] = {
            ValidationType.HEALTH: health,
            ValidationType.ALL: standard + [self.check_gitops_applications],
            ValidationType.PRE_UPDATE: standard + [self.check_stuck_pods, self.check_pending_pvcs],
            ValidationType.POST_UPDATE: standard
            + [
                self.check_gitops_applications,
                self.check_pod_execution,
                self.check_service_discovery,
            ],
        }
        return scopes[validation_type]

    def _run_check(self, check: Check, results: ValidationResults) -> ValidationResults:
        name = check.__name__.replace("check_", "").replace("_", "-")
        try:
            return check(results)
        except ClusterOpsError as e:
            logger.error(f"Check {name} could not run: {e}")
            return results.error(name, str(e))

    # Cluster health

    def check_control_plane(self, results: ValidationResults) -> ValidationResults:
        cluster = self.eks.describe_cluster()
        if cluster.status == ResourceStatus.ACTIVE:
            return results.success("control-plane", "Cluster is in ACTIVE state")
        return results.error(
            "control-plane", f"Cluster is not in ACTIVE state: {cluster.status.value}"
        )

    def check_nodegroups(self, results: ValidationResults) -> ValidationResults:
        names = self.eks.list_nodegroups()
        if not names:
            return results.error("nodegroups", "No node groups found")

        nodegroups = [self.eks.describe_nodegroup(name) for name in names]
        inactive = [ng for ng in nodegroups if ng.status != ResourceStatus.ACTIVE]
        if not inactive:
            return results.success("nodegroups", f"All {len(nodegroups)} node groups are ACTIVE")

        details = ", ".join(f"{ng.name}={ng.status.value}" for ng in inactive)
        return results.error(
            "nodegroups",
            f"Only {len(nodegroups) - len(inactive)} out of {len(nodegroups)} "
            f"node groups are ACTIVE ({details})",
        )

    def check_nodes(self, results: ValidationResults) -> ValidationResults:
        nodes = self.k8s.get_items("nodes")
        if nodes is None:
            return results.error("nodes", "Cannot list nodes")
        if not nodes:
            return results.error("nodes", "No nodes found")

        not_ready = [node["metadata"]["name"] for node in nodes if not is_node_ready(node)]
        if not not_ready:
            return results.success("nodes", f"All {len(nodes)} nodes are Ready")
        return results.error(
            "nodes",
            f"Only {len(nodes) - len(not_ready)} out of {len(nodes)} nodes are Ready "
            f"(not ready: {', '.join(not_ready[:5])})",
        )

    def check_control_plane_components(self, results: ValidationResults) -> ValidationResults:
        components = self.k8s.get_items("componentstatuses")
        if not components:
            logger.debug("Component statuses not available, skipping")
            return results

        unhealthy = []
        for component in components:
            conditions = component.get("conditions") or []
            healthy = any(
                c.get("type") == "Healthy" and c.get("status") == "True" for c in conditions
            )
            if not healthy:
                unhealthy.append(component.get("metadata", {}).get("name", "unknown"))

        if not unhealthy:
            return results.success("control-plane-components", "Control plane is healthy")
        return results.warn(
            "control-plane-components",
            f"Control plane components may not be fully healthy: {', '.join(unhealthy)}",
        )

    # Workloads and add-ons

    def check_system_pods(self, results: ValidationResults) -> ValidationResults:
        for namespace in SYSTEM_NAMESPACES:
            if not self.k8s.namespace_exists(namespace):
                logger.info(f"Namespace {namespace} does not exist")
                continue

            pods = self.k8s.get_items("pods", namespace=namespace)
            if pods is None:
                results.error(f"pods/{namespace}", f"Cannot list pods in namespace {namespace}")
                continue
            if not pods:
                logger.info(f"No pods found in namespace {namespace}")
                continue

            summary = summarize_pods(pods)
            if summary.total == summary.running:
                results.success(
                    f"pods/{namespace}", f"All {summary.total} pods in namespace {namespace} are running"
                )
            else:
                message = (
                    f"Only {summary.running} out of {summary.total} pods in namespace "
                    f"{namespace} are running"
                )
                if summary.failing:
                    message += f": {', '.join(summary.failing[:3])}"
                results.error(f"pods/{namespace}", message)
        return results

    def check_addons(self, results: ValidationResults) -> ValidationResults:
        names = self.eks.list_addons()
        if not names:
            return results.warn("addons", "No EKS addons found")

        for name in names:
            addon = self.eks.describe_addon(name)
            if addon is None:
                results.error(f"addon/{name}", f"Addon {name} disappeared while validating")
            elif addon.status == ResourceStatus.ACTIVE:
                results.success(f"addon/{name}", f"Addon {name} is ACTIVE (version: {addon.version})")
            else:
                results.error(f"addon/{name}", f"Addon {name} is not ACTIVE: {addon.status.value}")
        return results

    def _check_kube_system_pods(
        self, results: ValidationResults, name: str, label: str, selector: str
    ) -> ValidationResults:
        pods = self.k8s.get_items("pods", namespace="kube-system", selector=selector)
        if pods is None:
            return results.error(name, f"Cannot list {label} pods")
        if not pods:
            return results.warn(name, f"{label} pods not found")

        summary = summarize_pods(pods, allow_completed=False)
        if summary.total == summary.running:
            return results.success(name, f"{label} is running ({summary.running}/{summary.total} pods)")
        return results.error(
            name, f"{label} is not fully running ({summary.running}/{summary.total} pods)"
        )

    def check_vpc_cni(self, results: ValidationResults) -> ValidationResults:
        return self._check_kube_system_pods(results, "vpc-cni", "VPC CNI", "app=aws-node")

    def check_coredns(self, results: ValidationResults) -> ValidationResults:
        return self._check_kube_system_pods(results, "coredns", "CoreDNS", "k8s-app=kube-dns")

    def check_ebs_csi(self, results: ValidationResults) -> ValidationResults:
        return self._check_kube_system_pods(
            results, "ebs-csi", "EBS CSI driver", "app=ebs-csi-controller"
        )

    def check_storage_classes(self, results: ValidationResults) -> ValidationResults:
        classes = self.k8s.get_items("storageclass")
        if classes:
            return results.success("storage-classes", f"Found {len(classes)} storage classes")
        return results.warn("storage-classes", "No storage classes found")

    def check_gitops_applications(self, results: ValidationResults) -> ValidationResults:
        apps = self.k8s.get_items("applications.argoproj.io", namespace=ARGOCD_NAMESPACE)
        if apps is None:
            logger.info("ArgoCD applications not available, skipping GitOps check")
            return results
        if not apps:
            return results.warn("gitops", "No ArgoCD applications found")

        for app in apps:
            name = app.get("metadata", {}).get("name", "unknown")
            status = app.get("status", {})
            sync = status.get("sync", {}).get("status", "Unknown")
            health = status.get("health", {}).get("status", "Unknown")
            if sync == "Synced" and health == "Healthy":
                results.success(f"gitops/{name}", f"Application {name} is Synced and Healthy")
            else:
                results.warn(f"gitops/{name}", f"Application {name} is {sync}/{health}")
        return results

    # Smoke tests

    def _run_probe_pod(self, prefix: str, image: str, command: List[str]) -> bool:
        name = f"{prefix}-{uuid.uuid4().hex[:6]}"
        success, output = self.k8s.run_pod(name, image, command)
        if not success:
            logger.debug(f"Probe pod {name} failed: {output}")
        return success

    def check_dns_resolution(self, results: ValidationResults) -> ValidationResults:
        if self._run_probe_pod("dns-test", "busybox", ["nslookup", DNS_LOOKUP_TARGET]):
            return results.success("dns-resolution", "DNS resolution is working")
        return results.error("dns-resolution", "DNS resolution is not working")

    def check_pod_execution(self, results: ValidationResults) -> ValidationResults:
        if self._run_probe_pod("validation-test", "alpine", ["echo", "Cluster validation test"]):
            return results.success("pod-execution", "Basic pod creation and execution works")
        return results.error("pod-execution", "Basic pod creation and execution failed")

    def check_service_discovery(self, results: ValidationResults) -> ValidationResults:
        if self._run_probe_pod("service-test", "busybox", ["nslookup", DNS_LOOKUP_TARGET]):
            return results.success("service-discovery", "Service discovery works")
        return results.error("service-discovery", "Service discovery failed")

    # Pre-update readiness

    def check_stuck_pods(self, results: ValidationResults) -> ValidationResults:
        pods = self.k8s.get_items("pods", all_namespaces=True)
        if pods is None:
            return results.error("stuck-pods", "Cannot list pods")

        stuck = [
            f"{pod_name(pod)} ({pod_phase(pod)})"
            for pod in pods
            if pod_phase(pod) not in ("Running", "Succeeded")
        ]
        if stuck:
            return results.warn(
                "stuck-pods",
                f"Found {len(stuck)} pods not in Running/Succeeded state: {', '.join(stuck[:5])}",
            )
        return results.success("stuck-pods", "No stuck pods found")

    def check_pending_pvcs(self, results: ValidationResults) -> ValidationResults:
        pvcs = self.k8s.get_items("pvc", all_namespaces=True)
        if pvcs is None:
            return results.error("pvcs", "Cannot list persistent volume claims")

        unbound = [
            pod_name(pvc) for pvc in pvcs if pvc.get("status", {}).get("phase") != "Bound"
        ]
        if unbound:
            return results.warn(
                "pvcs", f"Found {len(unbound)} PVCs not in Bound state: {', '.join(unbound[:5])}"
            )
        return results.success("pvcs", "All PVCs are bound")

    # Rollback readiness

    def resolve_backup_dir(self, backup_dir: Optional[Path]) -> Optional[Path]:
        if backup_dir:
            return Path(backup_dir)
        return latest_backup(self.backup_root, self.cluster_name)

    def check_rollback_backup(
        self, results: ValidationResults, backup_dir: Optional[Path]
    ) -> ValidationResults:
        resolved = self.resolve_backup_dir(backup_dir)
        if resolved is None:
            return results.error(
                "backup", f"No backup directory given and no backup recorded for {self.cluster_name}"
            )
        if not resolved.is_dir():
            return results.error("backup", f"Backup directory not found: {resolved}")

        missing = missing_files(resolved)
        for filename in REQUIRED_ROLLBACK_FILES:
            if filename in missing:
                results.error(f"backup/{filename}", f"Backup file missing: {filename}")
            else:
                results.success(f"backup/{filename}", f"Backup file found: {filename}")

        return results.warn(
            "rollback-procedure",
            f"Rollback is not automated; restore manually from {resolved}",
        )
