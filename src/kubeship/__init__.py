"""kubeship - declarative Kubernetes deployments.

Plans, diffs and applies namespaces, secrets, configmaps and application
workloads described by a single typed configuration, and builds the
container images those workloads run.
"""

__version__ = "0.1.0"
