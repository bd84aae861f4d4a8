"""Find misconfigured Kubernetes objects and describe what is wrong with them."""

__version__ = "0.1.0"