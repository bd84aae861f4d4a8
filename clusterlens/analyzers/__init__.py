"""Analyzers, one per kind of Kubernetes object."""