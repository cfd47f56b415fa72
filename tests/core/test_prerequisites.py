"""Test prerequisite checks."""

import subprocess

import pytest
from unittest.mock import Mock, patch

from clusterops.core.prerequisites import PrerequisiteChecker, check_tools
from clusterops.errors import PrerequisiteError


class TestCheckTools:
    @patch("clusterops.core.prerequisites.shutil.which")
    def test_all_present(self, mock_which):
        mock_which.return_value = "/usr/local/bin/tool"
        check_tools(["aws", "kubectl"])

    @patch("clusterops.core.prerequisites.shutil.which")
    def test_missing_tool(self, mock_which):
        mock_which.side_effect = lambda tool: None if tool == "kubectl" else f"/usr/bin/{tool}"

        with pytest.raises(PrerequisiteError, match="Required tools not installed: kubectl"):
            check_tools(["aws", "kubectl"])


class TestPrerequisiteChecker:
    @patch("clusterops.core.prerequisites.subprocess.run")
    @patch("clusterops.core.prerequisites.shutil.which")
    def test_missing_tool_makes_no_remote_calls(self, mock_which, mock_run, mock_eks):
        mock_which.return_value = None
        factory = Mock()

        with pytest.raises(PrerequisiteError):
            PrerequisiteChecker(mock_eks, k8s_factory=factory).check()

        mock_eks.caller_identity.assert_not_called()
        mock_eks.cluster_exists.assert_not_called()
        mock_run.assert_not_called()
        factory.assert_not_called()

    @patch("clusterops.core.prerequisites.subprocess.run")
    @patch("clusterops.core.prerequisites.shutil.which")
    def test_success(self, mock_which, mock_run, mock_eks, mock_k8s):
        mock_which.return_value = "/usr/bin/tool"
        mock_eks.caller_identity.return_value = {"Arn": "arn:aws:iam::123456789012:user/ops"}
        mock_eks.cluster_exists.return_value = True
        factory = Mock(return_value=mock_k8s)

        k8s = PrerequisiteChecker(mock_eks, k8s_factory=factory).check()

        assert k8s is mock_k8s
        factory.assert_called_once_with(context="dev-eks")
        cmd = mock_run.call_args[0][0]
        assert cmd[:3] == ["aws", "eks", "update-kubeconfig"]
        assert "--alias" in cmd

    @patch("clusterops.core.prerequisites.subprocess.run")
    @patch("clusterops.core.prerequisites.shutil.which")
    def test_cluster_missing(self, mock_which, mock_run, mock_eks):
        mock_which.return_value = "/usr/bin/tool"
        mock_eks.cluster_exists.return_value = False

        with pytest.raises(PrerequisiteError, match="does not exist in region ap-southeast-2"):
            PrerequisiteChecker(mock_eks, k8s_factory=Mock()).check()

        mock_run.assert_not_called()

    @patch("clusterops.core.prerequisites.subprocess.run")
    @patch("clusterops.core.prerequisites.shutil.which")
    def test_kubeconfig_failure(self, mock_which, mock_run, mock_eks):
        mock_which.return_value = "/usr/bin/tool"
        mock_eks.cluster_exists.return_value = True
        mock_run.side_effect = subprocess.CalledProcessError(255, "aws", stderr="AccessDenied")

        with pytest.raises(PrerequisiteError, match="Failed to update kubeconfig"):
            PrerequisiteChecker(mock_eks, k8s_factory=Mock()).check()

    @patch("clusterops.core.prerequisites.subprocess.run")
    @patch("clusterops.core.prerequisites.shutil.which")
    def test_cluster_unreachable(self, mock_which, mock_run, mock_eks, mock_k8s):
        mock_which.return_value = "/usr/bin/tool"
        mock_eks.cluster_exists.return_value = True
        mock_k8s.cluster_reachable.return_value = False

        with pytest.raises(PrerequisiteError, match="Cannot connect to cluster dev-eks"):
            PrerequisiteChecker(mock_eks, k8s_factory=Mock(return_value=mock_k8s)).check()
