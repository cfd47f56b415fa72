"""Update sequencing for control plane, node groups, add-ons and config."""

from typing import Callable, List, Optional

from ..aws import EksClient
from ..config import RunSettings, load_cluster_config
from ..errors import (
    ClusterOpsError,
    ConfirmationDeclinedError,
    InputValidationError,
    ValidationFailedError,
)
from ..model.cluster import ClusterConfigFile, ClusterState, ResourceStatus
from ..model.options import UpdateType, ValidationType
from ..model.update import StepOutcome, UpdateRequest, UpdateSummary
from ..upgrade import UpgradeAdvisor
from ..utils.logger import get_logger
from .backup import BackupManager
from .validator import ClusterValidator
from .waiter import StatusWaiter

logger = get_logger(__name__)

# Provider-managed add-ons kept in step with the cluster version
MANAGED_ADDONS = ["vpc-cni", "coredns", "kube-proxy", "aws-ebs-csi-driver"]


class UpdateSequencer:
    """Drives a cluster through an update, one scope at a time.

    The control plane always finishes before node groups start, and node
    groups finish before add-ons start. Every mutation waits for the resource
    to return to ACTIVE before the next one is issued; any failure aborts the
    rest of the run. Rollback is never attempted here.
    """

    def __init__(
        self,
        settings: RunSettings,
        eks: EksClient,
        waiter: StatusWaiter,
        backups: Optional[BackupManager] = None,
        validator: Optional[ClusterValidator] = None,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.settings = settings
        self.eks = eks
        self.waiter = waiter
        self.backups = backups
        self.validator = validator
        self.confirm = confirm or (lambda message: False)
        self.advisor = UpgradeAdvisor()
        self._version_updated: List[str] = []

    def run(self, request: UpdateRequest) -> UpdateSummary:
        """Execute an update request and return what happened."""
        summary = UpdateSummary(
            cluster=self.settings.cluster_name,
            environment=self.settings.environment.value,
            region=self.settings.region,
            update_type=request.update_type.value,
            dry_run=request.dry_run,
        )
        self._version_updated = []

        cluster = self.eks.describe_cluster()
        nodegroups = self.eks.list_nodegroups()
        summary.version_before = cluster.version
        logger.info(f"Current Kubernetes version: {cluster.version}")
        logger.info(f"Node groups: {' '.join(nodegroups) or 'none'}")

        target = self._resolve_target(request, cluster)
        summary.target_version = target

        config = None
        if request.update_type == UpdateType.CONFIG:
            config = self._load_config(request)

        try:
            self._prepare(request, summary)

            if request.update_type.includes_control_plane:
                self.update_control_plane(summary, request, cluster, target, nodegroups)
            if request.update_type.includes_nodegroups:
                self.update_nodegroups(summary, request, nodegroups, target or cluster.version)
            if request.update_type.includes_addons:
                self.update_addons(summary, request, target or cluster.version)
            if config is not None:
                self.update_config(summary, request, cluster, config, nodegroups)

            if not request.dry_run and not request.skip_validation:
                self._post_update_validation(summary)
        except ClusterOpsError as e:
            logger.error(f"Update failed: {e}")
            if summary.backup_path:
                logger.error(f"Backup of the pre-update state is in {summary.backup_path}")
            raise

        if not request.dry_run:
            summary.version_after = self.eks.describe_cluster().version
        logger.info("Cluster update completed successfully")
        return summary

    # Planning

    def _resolve_target(self, request: UpdateRequest, cluster: ClusterState) -> Optional[str]:
        target = request.target_version
        if not target and request.update_type == UpdateType.K8S_VERSION:
            target = self.eks.latest_cluster_version()
            if not target:
                raise InputValidationError("Cannot determine the latest available Kubernetes version")
            logger.info(f"Target version set to latest available: {target}")

        if target and request.update_type.includes_control_plane:
            path = self.advisor.check_target(cluster.version, target)
            if path:
                logger.info(f"Control plane will move {cluster.version} → {target}")
        elif target and target != cluster.version:
            # Add-on and AMI lookups must match the version the cluster runs
            raise InputValidationError(
                f"Target version {target} differs from the cluster version {cluster.version}; "
                f"update type {request.update_type.value} does not update the control plane"
            )
        return target

    def _load_config(self, request: UpdateRequest) -> ClusterConfigFile:
        if request.config_file is None:
            raise InputValidationError("A cluster configuration file is required for config updates")
        config = load_cluster_config(request.config_file)
        if config.name != self.settings.cluster_name:
            raise InputValidationError(
                f"Configuration file {request.config_file} describes cluster {config.name}, "
                f"not {self.settings.cluster_name}"
            )
        return config

    def _prepare(self, request: UpdateRequest, summary: UpdateSummary) -> None:
        """Backup, pre-update gate and confirmation, in that order."""
        if request.dry_run:
            logger.info("Dry run: backup creation skipped")
        elif request.skip_backup or self.backups is None:
            logger.info("Backup creation skipped")
        else:
            summary.backup_path = self.backups.create().path

        if request.skip_validation or self.validator is None:
            logger.info("Pre-update validation skipped")
        else:
            results = self.validator.run(ValidationType.PRE_UPDATE)
            summary.pre_checks = results
            if not results.is_success(strict=not request.force):
                raise ValidationFailedError(
                    f"Pre-update validation failed ({results.failed} errors, "
                    f"{results.warnings} warnings). Use --force to proceed despite warnings",
                    results=results,
                )

        if request.dry_run or request.force:
            return

        message = f"Update cluster {self.settings.cluster_name} ({request.update_type.value}"
        if summary.target_version:
            message += f", target version {summary.target_version}"
        message += "). This operation may cause downtime. Proceed?"
        if not self.confirm(message):
            raise ConfirmationDeclinedError("Update cancelled")

    def _post_update_validation(self, summary: UpdateSummary) -> None:
        if self.validator is None:
            return
        results = self.validator.run(ValidationType.POST_UPDATE)
        summary.post_checks = results
        if not results.is_success():
            raise ValidationFailedError(
                f"Post-update validation failed with {results.failed} errors", results=results
            )

    # Steps

    def update_control_plane(
        self,
        summary: UpdateSummary,
        request: UpdateRequest,
        cluster: ClusterState,
        target: Optional[str],
        nodegroups: List[str],
    ) -> None:
        scope = "control-plane"
        if not target:
            summary.add(scope, cluster.name, StepOutcome.SKIPPED, "No target version given")
            logger.info("No target version given, control plane update skipped")
            return

        if cluster.version == target:
            summary.add(scope, cluster.name, StepOutcome.SKIPPED, f"Already at {target}")
            logger.info(f"Cluster is already at target version {target}")
            return

        if request.dry_run:
            summary.add(
                scope,
                cluster.name,
                StepOutcome.DRY_RUN,
                f"Would update control plane from {cluster.version} to {target}",
            )
            for name in nodegroups:
                summary.add(
                    "nodegroup-version", name, StepOutcome.DRY_RUN, f"Would update to {target}"
                )
            self._version_updated.extend(nodegroups)
            logger.info(f"[DRY RUN] Would update control plane from {cluster.version} to {target}")
            return

        self.eks.update_cluster_version(target)
        self.waiter.wait_for_active(
            lambda: self.eks.describe_cluster().status, f"Control plane {cluster.name}"
        )
        summary.add(scope, cluster.name, StepOutcome.COMPLETED, f"{cluster.version} → {target}")
        logger.info(f"Control plane update to {target} completed")

        for name in nodegroups:
            self._update_nodegroup_version(summary, name, target)

    def _update_nodegroup_version(self, summary: UpdateSummary, name: str, target: str) -> None:
        scope = "nodegroup-version"
        state = self.eks.describe_nodegroup(name)
        if state.version == target:
            summary.add(scope, name, StepOutcome.SKIPPED, f"Already at {target}")
            return

        self.eks.update_nodegroup_version(name, target)
        self.waiter.wait_for_active(
            lambda: self.eks.describe_nodegroup(name).status, f"Node group {name}"
        )
        self._version_updated.append(name)
        summary.add(scope, name, StepOutcome.COMPLETED, f"{state.version} → {target}")
        logger.info(f"Node group {name} update to {target} completed")

    def update_nodegroups(
        self,
        summary: UpdateSummary,
        request: UpdateRequest,
        nodegroups: List[str],
        kubernetes_version: str,
    ) -> None:
        """Refresh every node group to the recommended AMI release."""
        scope = "nodegroup-ami"
        if not nodegroups:
            logger.info("No node groups to update")
            return

        for name in nodegroups:
            if name in self._version_updated:
                summary.add(scope, name, StepOutcome.SKIPPED, "Refreshed by the version update")
                continue

            state = self.eks.describe_nodegroup(name)
            logger.info(
                f"Node group {name}: {','.join(state.instance_types) or 'unknown'}, "
                f"min={state.min_size}, max={state.max_size}, desired={state.desired_size}"
            )

            latest = self.eks.latest_release_version(state.ami_type, state.version or kubernetes_version)
            if latest and state.release_version == latest:
                summary.add(scope, name, StepOutcome.SKIPPED, f"Already at release {latest}")
                logger.info(f"Node group {name} is already at release {latest}")
                continue

            if request.dry_run:
                summary.add(
                    scope,
                    name,
                    StepOutcome.DRY_RUN,
                    f"Would update release {state.release_version} → {latest or 'latest'}",
                )
                logger.info(f"[DRY RUN] Would update node group {name} with latest AMI")
                continue

            self.eks.update_nodegroup_version(name)
            self.waiter.wait_for_active(
                lambda: self.eks.describe_nodegroup(name).status, f"Node group {name}"
            )
            summary.add(
                scope, name, StepOutcome.COMPLETED, f"{state.release_version} → {latest or 'latest'}"
            )
            logger.info(f"Node group {name} update completed")

    def update_addons(
        self, summary: UpdateSummary, request: UpdateRequest, kubernetes_version: str
    ) -> None:
        scope = "addon"
        for name in MANAGED_ADDONS:
            addon = self.eks.describe_addon(name)
            if addon is None:
                summary.add(scope, name, StepOutcome.SKIPPED, "Not installed")
                logger.info(f"Addon {name} is not installed, skipping")
                continue

            latest = self.eks.latest_addon_version(name, kubernetes_version)
            logger.info(f"Addon {name}: current={addon.version}, latest={latest}")
            if not latest:
                summary.add(
                    scope, name, StepOutcome.SKIPPED, f"No version available for {kubernetes_version}"
                )
                continue
            if addon.version == latest:
                summary.add(scope, name, StepOutcome.SKIPPED, f"Already at {latest}")
                continue

            if request.dry_run:
                summary.add(
                    scope, name, StepOutcome.DRY_RUN, f"Would update {addon.version} → {latest}"
                )
                logger.info(f"[DRY RUN] Would update addon {name} from {addon.version} to {latest}")
                continue

            self.eks.update_addon(name, latest)
            self.waiter.wait_for_active(lambda: self._addon_status(name), f"Addon {name}")
            summary.add(scope, name, StepOutcome.COMPLETED, f"{addon.version} → {latest}")
            logger.info(f"Addon {name} update completed")

    def _addon_status(self, name: str) -> ResourceStatus:
        addon = self.eks.describe_addon(name)
        return addon.status if addon else ResourceStatus.UNKNOWN

    def update_config(
        self,
        summary: UpdateSummary,
        request: UpdateRequest,
        cluster: ClusterState,
        config: ClusterConfigFile,
        nodegroups: List[str],
    ) -> None:
        """Reconcile node group scaling with a cluster config file."""
        scope = "config"
        if config.version and config.version != cluster.version:
            summary.add(
                scope,
                "version",
                StepOutcome.SKIPPED,
                f"Declared version {config.version} differs from live {cluster.version}; "
                f"use update type k8s-version",
            )
            logger.warning(
                f"Config declares version {config.version} but cluster runs {cluster.version}"
            )

        for declared in config.managed_nodegroups:
            if declared.name not in nodegroups:
                summary.add(
                    scope,
                    declared.name,
                    StepOutcome.SKIPPED,
                    "Not found in cluster; creating node groups is not supported",
                )
                logger.warning(f"Node group {declared.name} is declared but does not exist")
                continue

            state = self.eks.describe_nodegroup(declared.name)
            if declared.instance_type and declared.instance_type not in state.instance_types:
                logger.warning(
                    f"Node group {declared.name} instance type change to "
                    f"{declared.instance_type} requires replacing the node group"
                )

            min_size = declared.min_size if declared.min_size is not None else state.min_size
            max_size = declared.max_size if declared.max_size is not None else state.max_size
            desired = (
                declared.desired_capacity
                if declared.desired_capacity is not None
                else state.desired_size
            )
            current = (state.min_size, state.max_size, state.desired_size)
            wanted = (min_size, max_size, desired)
            if wanted == current:
                summary.add(scope, declared.name, StepOutcome.SKIPPED, "Scaling matches config")
                continue
            if None in wanted or not (min_size <= desired <= max_size):
                raise InputValidationError(
                    f"Invalid scaling for node group {declared.name}: "
                    f"min={min_size} desired={desired} max={max_size}"
                )

            detail = (
                f"min/max/desired {state.min_size}/{state.max_size}/{state.desired_size} → "
                f"{min_size}/{max_size}/{desired}"
            )
            if request.dry_run:
                summary.add(scope, declared.name, StepOutcome.DRY_RUN, f"Would change {detail}")
                logger.info(f"[DRY RUN] Would change node group {declared.name} {detail}")
                continue

            self.eks.update_nodegroup_scaling(declared.name, min_size, max_size, desired)
            self.waiter.wait_for_active(
                lambda: self.eks.describe_nodegroup(declared.name).status,
                f"Node group {declared.name}",
            )
            summary.add(scope, declared.name, StepOutcome.COMPLETED, detail)
            logger.info(f"Node group {declared.name} scaling update completed")
