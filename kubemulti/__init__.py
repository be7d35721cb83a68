"""List Kubernetes resources across KubeStellar managed clusters as one table."""

__version__ = "0.1.0"
__all__ = ["__version__"]