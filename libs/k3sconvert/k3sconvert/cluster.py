"""
Cluster operations for k3sconvert.

Submits generated manifests to a cluster and lists, deletes or scales the
objects of a compose project. Everything lives in the default namespace.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TextIO

import yaml
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config import ConfigException

from .errors import ClusterError, ConfigurationConflict
from .types import ResourceKind

logger = logging.getLogger(__name__)

NAMESPACE = "default"


def load_api() -> client.CoreV1Api:
    """
    Create a CoreV1Api client.

    Uses the local kubeconfig, falling back to the in-cluster service account.

    Raises:
        ClusterError: If no client configuration can be loaded
    """
    try:
        config.load_kube_config()
    except (ConfigException, OSError):
        try:
            config.load_incluster_config()
        except ConfigException as e:
            raise ClusterError(f"Failed to get Kubernetes client config: {e}") from e
    return client.CoreV1Api()


def load_manifest(path: Path) -> Optional[Dict[str, Any]]:
    """
    Decode a manifest file by the format named in its file name.

    Returns:
        Manifest dict, or None if the name mentions neither json nor yaml

    Raises:
        ClusterError: If the file cannot be read or decoded
    """
    try:
        content = path.read_text()
        if "json" in path.name:
            return json.loads(content)
        if "yaml" in path.name:
            return yaml.safe_load(content)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ClusterError(f"Failed to load {path.name}: {e}") from e
    return None


def upload_manifests(api: client.CoreV1Api, directory: str = ".") -> List[str]:
    """
    Create the Services, then the ReplicationControllers, found in a directory.

    Files whose name contains "svc" are Services, files whose name contains
    "rc" are ReplicationControllers. A rejected object is reported and
    skipped.

    Args:
        api: CoreV1Api client
        directory: Directory holding generated manifests

    Returns:
        Names of the files whose object was created
    """
    files = sorted(p for p in Path(directory).iterdir() if p.is_file())

    steps = [
        (ResourceKind.SERVICE, api.create_namespaced_service),
        (ResourceKind.REPLICATION_CONTROLLER, api.create_namespaced_replication_controller),
    ]

    created = []
    for kind, create in steps:
        for path in files:
            if kind.value not in path.name:
                continue

            manifest = load_manifest(path)
            if manifest is None:
                logger.debug(f"Skipping {path.name}: neither json nor yaml")
                continue

            try:
                result = create(namespace=NAMESPACE, body=manifest)
            except ApiException as e:
                print(f"Failed to create {kind.kind} from {path.name}: {e.status} {e.reason}")
                continue

            logger.debug(f"Created {kind.kind}: {result}")
            created.append(path.name)

    return created


def list_resources(
    api: client.CoreV1Api,
    names: Iterable[str],
    services: bool = True,
    rcs: bool = True,
    out: Optional[TextIO] = None,
) -> None:
    """Print tables of the Services and ReplicationControllers of a project."""
    out = out or sys.stdout
    names = list(names)

    if services:
        out.write(f"{'Name':<20}{'Cluster IP':<20}{'Ports':<20}{'Selectors':<20}\n")
        for name in names:
            try:
                svc = api.read_namespaced_service(name, NAMESPACE)
            except ApiException:
                logger.debug(f"Cannot find service for: {name}")
                continue

            ports = ",".join(f"{p.protocol}({p.port})" for p in svc.spec.ports or [])
            selectors = ",".join(
                f"{k}={v}" for k, v in (svc.metadata.labels or {}).items()
            )
            out.write(
                f"{svc.metadata.name:<20}{svc.spec.cluster_ip or '':<20}"
                f"{ports:<20}{selectors:<20}\n"
            )

    if rcs:
        out.write(
            f"{'Name':<15}{'Containers':<15}{'Images':<30}{'Replicas':<10}{'Selectors':<20}\n"
        )
        for name in names:
            try:
                rc = api.read_namespaced_replication_controller(name, NAMESPACE)
            except ApiException:
                logger.debug(f"Cannot find rc for: {name}")
                continue

            containers = rc.spec.template.spec.containers
            selectors = ",".join(f"{k}={v}" for k, v in (rc.spec.selector or {}).items())
            out.write(
                f"{rc.metadata.name:<15}"
                f"{','.join(c.name for c in containers):<15}"
                f"{','.join(c.image for c in containers):<30}"
                f"{rc.spec.replicas:<10}"
                f"{selectors:<20}\n"
            )


def delete_resources(
    api: client.CoreV1Api,
    names: Iterable[str],
    kind: ResourceKind = ResourceKind.SERVICE,
    only: Optional[str] = None,
) -> List[str]:
    """
    Delete the Service or ReplicationController of each project service.

    Args:
        api: CoreV1Api client
        names: Compose service names
        kind: SERVICE or REPLICATION_CONTROLLER
        only: Restrict to this service name

    Returns:
        Names of the deleted objects

    Raises:
        ClusterError: If a deletion fails
    """
    if kind == ResourceKind.SERVICE:
        delete = api.delete_namespaced_service
    elif kind == ResourceKind.REPLICATION_CONTROLLER:
        delete = api.delete_namespaced_replication_controller
    else:
        raise ValueError(f"Cannot delete {kind.kind} objects")

    deleted = []
    for name in names:
        if only and name != only:
            continue
        try:
            delete(name, NAMESPACE)
        except ApiException as e:
            raise ClusterError(
                f"Unable to delete {kind.kind} {name}: {e.status} {e.reason}"
            ) from e
        print(f"Deleted {kind.kind} {name}")
        deleted.append(name)
    return deleted


def scale_replication_controllers(
    api: client.CoreV1Api,
    names: Iterable[str],
    replicas: int,
    only: Optional[str] = None,
) -> Dict[str, int]:
    """
    Set the replica count of the project's ReplicationControllers.

    Args:
        api: CoreV1Api client
        names: Compose service names
        replicas: Desired replica count, must be positive
        only: Restrict to this service name

    Returns:
        Replica count reported by the cluster, by name

    Raises:
        ConfigurationConflict: If replicas is not positive
        ClusterError: If a scale update fails
    """
    if replicas <= 0:
        raise ConfigurationConflict("Scale must be defined and a positive number")

    scaled = {}
    for name in names:
        if only and name != only:
            continue
        try:
            scale = api.patch_namespaced_replication_controller_scale(
                name, NAMESPACE, {"spec": {"replicas": replicas}}
            )
        except ApiException as e:
            raise ClusterError(f"Error updating scaling data: {e.status} {e.reason}") from e

        print(f"Scaling {name} to: {scale.spec.replicas}")
        scaled[name] = scale.spec.replicas
    return scaled
