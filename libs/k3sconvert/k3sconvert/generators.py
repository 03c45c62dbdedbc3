"""
Kubernetes manifest generators for compose services.

Converts a compose service to a Service, ReplicationController, Deployment,
DaemonSet and ReplicaSet. The caller decides which of them to emit.
"""

import copy
from typing import Any, Dict

from .errors import UnknownRestartPolicy
from .mappers import config_envs, config_ports, config_service_ports, config_volumes
from .types import ComposeService, ResourceKind, RestartPolicy

RESTART_POLICIES = {
    "": RestartPolicy.ALWAYS,
    "always": RestartPolicy.ALWAYS,
    "no": RestartPolicy.NEVER,
    "on-failure": RestartPolicy.ON_FAILURE,
}


def restart_policy(service: ComposeService) -> RestartPolicy:
    """Map the compose restart key to a pod restart policy."""
    try:
        return RESTART_POLICIES[service.restart]
    except KeyError:
        raise UnknownRestartPolicy(service.restart, service.name) from None


def service_labels(service: ComposeService) -> Dict[str, str]:
    """Labels for every generated object; compose labels win on conflict."""
    labels = {"service": service.name}
    for key, value in service.labels.items():
        labels[key] = value
    return labels


def _pod_template(name: str, image: str) -> Dict[str, Any]:
    return {
        "metadata": {},
        "spec": {
            "containers": [
                {
                    "name": name,
                    "image": image,
                },
            ],
        },
    }


def init_service(name: str) -> Dict[str, Any]:
    """Create an empty Service for a compose service."""
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": name,
        },
        "spec": {
            "selector": {"service": name},
        },
    }


def init_replication_controller(name: str, image: str) -> Dict[str, Any]:
    """Create a ReplicationController running one replica."""
    return {
        "apiVersion": "v1",
        "kind": "ReplicationController",
        "metadata": {
            "name": name,
        },
        "spec": {
            "replicas": 1,
            "selector": {"service": name},
            "template": _pod_template(name, image),
        },
    }


def init_deployment(name: str, image: str) -> Dict[str, Any]:
    """Create a Deployment running one replica."""
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": name,
            "labels": {"service": name},
        },
        "spec": {
            "replicas": 1,
            "selector": {
                "matchLabels": {"service": name},
            },
            "template": _pod_template(name, image),
        },
    }


def init_daemon_set(name: str, image: str) -> Dict[str, Any]:
    """Create a DaemonSet; it has no replica count."""
    return {
        "apiVersion": "apps/v1",
        "kind": "DaemonSet",
        "metadata": {
            "name": name,
        },
        "spec": {
            "selector": {
                "matchLabels": {"service": name},
            },
            "template": _pod_template(name, image),
        },
    }


def init_replica_set(name: str, image: str) -> Dict[str, Any]:
    """Create a ReplicaSet running one replica."""
    return {
        "apiVersion": "apps/v1",
        "kind": "ReplicaSet",
        "metadata": {
            "name": name,
        },
        "spec": {
            "replicas": 1,
            "selector": {
                "matchLabels": {"service": name},
            },
            "template": _pod_template(name, image),
        },
    }


def _populate_pod_template(
    template: Dict[str, Any],
    container_fields: Dict[str, Any],
    pod_fields: Dict[str, Any],
    labels: Dict[str, str],
) -> None:
    template["metadata"]["labels"] = dict(labels)

    container = template["spec"]["containers"][0]
    for key, value in container_fields.items():
        if value:
            container[key] = copy.deepcopy(value)

    for key, value in pod_fields.items():
        if value:
            template["spec"][key] = copy.deepcopy(value)


def build_resources(service: ComposeService) -> Dict[ResourceKind, Dict[str, Any]]:
    """
    Generate all five resources for a compose service.

    Args:
        service: Compose service

    Returns:
        Manifest dicts keyed by resource kind

    Raises:
        MalformedEnvEntry, InvalidPort, UnknownRestartPolicy
    """
    name = service.name

    svc = init_service(name)
    controllers = {
        ResourceKind.REPLICATION_CONTROLLER: init_replication_controller(name, service.image),
        ResourceKind.DEPLOYMENT: init_deployment(name, service.image),
        ResourceKind.DAEMON_SET: init_daemon_set(name, service.image),
        ResourceKind.REPLICA_SET: init_replica_set(name, service.image),
    }

    envs = config_envs(service)
    volume_mounts, volumes = config_volumes(service)
    ports = config_ports(service)
    service_ports = config_service_ports(service)
    labels = service_labels(service)
    policy = restart_policy(service)

    security_context: Dict[str, Any] = {}
    if service.privileged:
        security_context["privileged"] = True

    container_fields: Dict[str, Any] = {
        "command": list(service.command),
        "workingDir": service.working_dir,
        "ports": ports,
        "env": envs,
        "volumeMounts": volume_mounts,
        "securityContext": security_context,
    }
    pod_fields: Dict[str, Any] = {
        "volumes": volumes,
        "restartPolicy": policy.value,
    }

    for resource in controllers.values():
        resource["metadata"]["labels"] = dict(labels)
        _populate_pod_template(
            resource["spec"]["template"], container_fields, pod_fields, labels
        )

    svc["metadata"]["labels"] = dict(labels)
    if service_ports:
        svc["spec"]["ports"] = service_ports

    resources: Dict[ResourceKind, Dict[str, Any]] = {ResourceKind.SERVICE: svc}
    resources.update(controllers)
    return resources
