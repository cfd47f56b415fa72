"""EKS cluster update, validation and backup tooling."""

__version__ = "0.1.0"
