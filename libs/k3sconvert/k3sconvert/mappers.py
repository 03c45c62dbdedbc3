"""
Field mappers for compose service definitions.

Translate the string mini-syntaxes of docker-compose (environment entries,
volume bindings, port mappings) into typed records and Kubernetes fragments.
"""

import logging
import random
import re
import string
from typing import Any, Dict, List, Optional, Set, Tuple

from .errors import InvalidPort, MalformedEnvEntry
from .types import (
    ComposeService,
    ContainerPortSpec,
    EnvVar,
    IntOrString,
    ServicePortSpec,
    VolumeBinding,
)

logger = logging.getLogger(__name__)

VOLUME_NAME_LENGTH = 20
_VOLUME_NAME_CHARS = string.ascii_lowercase + string.digits
_INT_RE = re.compile(r"[+-]?[0-9]+")


def random_volume_name(length: int = VOLUME_NAME_LENGTH) -> str:
    """Generate a random lowercase alphanumeric volume name."""
    return "".join(random.choices(_VOLUME_NAME_CHARS, k=length))


def _parse_port_number(text: str, raw: str) -> int:
    text = text.strip()
    if not _INT_RE.fullmatch(text):
        raise InvalidPort(raw)
    return int(text)


def parse_env(raw: str) -> EnvVar:
    """
    Parse a compose environment entry.

    Args:
        raw: "KEY=VALUE" or "KEY: VALUE" (value may be single-quoted)

    Returns:
        Parsed EnvVar

    Raises:
        MalformedEnvEntry: If the entry has neither '=' nor ':', or no name
    """
    if "=" in raw:
        name, _, value = raw.partition("=")
        name = name.strip()
        if not name:
            raise MalformedEnvEntry(raw)
        return EnvVar(name=name, value=value.strip())

    if ":" in raw:
        name, _, value = raw.partition(":")
        name = name.strip()
        if not name:
            raise MalformedEnvEntry(raw)
        value = value.strip()
        if "'" in value:
            value = value.strip("'")
        return EnvVar(name=name, value=value)

    raise MalformedEnvEntry(raw)


def parse_volume(raw: str, name: Optional[str] = None) -> Optional[VolumeBinding]:
    """
    Parse a compose volume binding.

    Args:
        raw: "host:container" or "host:container:mode"
        name: Volume name; a random one is generated if not given

    Returns:
        VolumeBinding, or None if the entry has no ':' separator
    """
    host, sep, rest = raw.partition(":")
    if not sep:
        return None

    container = rest.strip()
    read_only = True
    # A second ':' means a trailing access mode
    if ":" in rest:
        mode = raw.rsplit(":", 1)[1]
        read_only = mode != "rw"
        container = container.split(":", 1)[0]

    return VolumeBinding(
        host_path=host.strip(),
        container_path=container,
        read_only=read_only,
        name=name or random_volume_name(),
    )


def parse_container_port(raw: str) -> ContainerPortSpec:
    """
    Parse the container side of a compose port mapping.

    "8080:80" yields container port 80, "80" yields 80.

    Raises:
        InvalidPort: If the container port is not an integer
    """
    if ":" in raw:
        target = raw.split(":", 1)[1]
    else:
        target = raw
    return ContainerPortSpec(container_port=_parse_port_number(target, raw))


def parse_service_port(raw: str) -> ServicePortSpec:
    """
    Parse a compose port mapping into a Service port.

    "8080:80" exposes 8080 and targets 80; "80" uses 80 for both.

    Raises:
        InvalidPort: If either side is not an integer
    """
    if ":" in raw:
        exposed, _, target = raw.partition(":")
        exposed = exposed.strip()
        target = target.strip()
    else:
        exposed = target = raw.strip()

    port = _parse_port_number(exposed, raw)
    target_port = _parse_port_number(target, raw)

    return ServicePortSpec(
        port=port,
        name=exposed,
        target_port=IntOrString(int_val=target_port, str_val=target),
    )


def config_envs(service: ComposeService) -> List[Dict[str, str]]:
    """Build the container env list for a service."""
    envs = []
    for raw in service.environment:
        try:
            env = parse_env(raw)
        except MalformedEnvEntry:
            raise MalformedEnvEntry(raw, service.name) from None
        envs.append(env.to_manifest())
    return envs


def config_volumes(
    service: ComposeService,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Build volume mounts and hostPath volumes for a service.

    Returns:
        (volumeMounts, volumes), correlated by generated volume name
    """
    volume_mounts: List[Dict[str, Any]] = []
    volumes: List[Dict[str, Any]] = []
    taken: Set[str] = set()

    for raw in service.volumes:
        name = random_volume_name()
        while name in taken:
            name = random_volume_name()

        binding = parse_volume(raw, name)
        if binding is None:
            logger.debug(f"Skipping volume {raw!r} of service {service.name}: no ':'")
            continue
        taken.add(name)

        mount: Dict[str, Any] = {
            "name": binding.name,
            "mountPath": binding.container_path,
        }
        if binding.read_only:
            mount["readOnly"] = True
        volume_mounts.append(mount)

        volumes.append({
            "name": binding.name,
            "hostPath": {
                "path": binding.host_path,
            },
        })

    return volume_mounts, volumes


def config_ports(service: ComposeService) -> List[Dict[str, int]]:
    """Build the container port list for a service."""
    ports = []
    for raw in service.ports:
        try:
            port = parse_container_port(raw)
        except InvalidPort:
            raise InvalidPort(raw, service.name) from None
        ports.append(port.to_manifest())
    return ports


def config_service_ports(service: ComposeService) -> List[Dict[str, Any]]:
    """Build the Service port list for a service."""
    ports = []
    for raw in service.ports:
        try:
            port = parse_service_port(raw)
        except InvalidPort:
            raise InvalidPort(raw, service.name) from None
        ports.append(port.to_manifest())
    return ports
