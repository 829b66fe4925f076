"""
Load balancer naming.

Derives the deterministic Katapult load balancer name owned by a Kubernetes
service. The name is the only link between a service and its load balancer,
so it must never change for the same inputs.
"""

NAME_PREFIX = "k8s"
MAX_NAME_LENGTH = 60
DEFAULT_NAMESPACE = "default"


def load_balancer_name(cluster_name: str, namespace: str, name: str) -> str:
    """
    Build the load balancer name for a service.

    The namespace is left out for services in the default namespace. Names
    longer than MAX_NAME_LENGTH are cut down to their first MAX_NAME_LENGTH
    characters, so two services sharing that prefix end up with the same name.

    Args:
        cluster_name: Name of the cluster as presented to the controller
        namespace: Namespace of the service
        name: Name of the service

    Returns:
        The load balancer name, at most MAX_NAME_LENGTH characters long
    """
    parts = [NAME_PREFIX, cluster_name]
    if namespace and namespace != DEFAULT_NAMESPACE:
        parts.append(namespace)
    parts.append(name)

    return "-".join(parts)[:MAX_NAME_LENGTH]
