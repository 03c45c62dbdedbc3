"""
Type definitions for k3sconvert.

These dataclasses represent a parsed docker-compose project and the typed
records the field mappers produce from its string mini-syntaxes.
"""

import shlex
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RestartPolicy(str, Enum):
    """Kubernetes pod restart policy."""
    ALWAYS = "Always"
    NEVER = "Never"
    ON_FAILURE = "OnFailure"


class ResourceKind(str, Enum):
    """Kind of generated resource, valued by its file name suffix."""
    SERVICE = "svc"
    REPLICATION_CONTROLLER = "rc"
    DEPLOYMENT = "deployment"
    DAEMON_SET = "daemonset"
    REPLICA_SET = "replicaset"

    @property
    def kind(self) -> str:
        """Kubernetes kind name."""
        return {
            ResourceKind.SERVICE: "Service",
            ResourceKind.REPLICATION_CONTROLLER: "ReplicationController",
            ResourceKind.DEPLOYMENT: "Deployment",
            ResourceKind.DAEMON_SET: "DaemonSet",
            ResourceKind.REPLICA_SET: "ReplicaSet",
        }[self]


# Compose keys that have no Kubernetes counterpart in the generated manifests.
UNSUPPORTED_KEYS = frozenset({
    "build",
    "cap_add",
    "cap_drop",
    "cgroup_parent",
    "cpuset",
    "cpu_shares",
    "container_name",
    "devices",
    "dns",
    "dns_search",
    "dockerfile",
    "domainname",
    "entrypoint",
    "env_file",
    "expose",
    "external_links",
    "extra_hosts",
    "hostname",
    "ipc",
    "log_driver",
    "log_opt",
    "mem_limit",
    "memswap_limit",
    "network_mode",
    "pid",
    "read_only",
    "security_opt",
    "stdin_open",
    "tty",
    "user",
    "uts",
    "volume_driver",
    "volumes_from",
})


@dataclass
class EnvVar:
    """Container environment variable."""
    name: str
    value: str

    def to_manifest(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass
class VolumeBinding:
    """Host path volume bound into the container."""
    host_path: str
    container_path: str
    read_only: bool = True
    name: str = ""


@dataclass
class ContainerPortSpec:
    """Port exposed by the container."""
    container_port: int

    def to_manifest(self) -> Dict[str, int]:
        return {"containerPort": self.container_port}


@dataclass
class IntOrString:
    """Kubernetes int-or-string value; rendered as the integer."""
    int_val: int
    str_val: str = ""

    def to_manifest(self) -> int:
        return self.int_val


@dataclass
class ServicePortSpec:
    """Port exposed by the Kubernetes Service."""
    port: int
    name: str
    target_port: IntOrString
    protocol: str = "TCP"

    def to_manifest(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "protocol": self.protocol,
            "port": self.port,
            "targetPort": self.target_port.to_manifest(),
        }


def _as_list(value: Any) -> List[str]:
    """Normalize a compose string-or-list value to a list of strings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def _env_list(env_data: Any) -> List[str]:
    """Flatten compose environment (list or mapping) to raw entries."""
    if not env_data:
        return []
    if isinstance(env_data, dict):
        entries = []
        for key, value in env_data.items():
            if value is None:
                value = ""
            elif isinstance(value, bool):
                value = str(value).lower()
            entries.append(f"{key}={value}")
        return entries
    return [str(item) for item in env_data]


def _labels_map(label_data: Any) -> Dict[str, str]:
    """Parse compose labels (mapping or list of key=value)."""
    if not label_data:
        return {}
    if isinstance(label_data, dict):
        return {str(k): "" if v is None else str(v) for k, v in label_data.items()}

    labels = {}
    for item in label_data:
        key, _, value = str(item).partition("=")
        labels[key] = value
    return labels


def _volume_list(volume_data: Any) -> List[str]:
    """Normalize compose volumes; long syntax is folded to short syntax."""
    volumes = []
    for vol in volume_data or []:
        if isinstance(vol, dict):
            spec = f"{vol.get('source', '')}:{vol['target']}"
            # Short syntax defaults to read-only unless "rw" is given
            spec += ":ro" if vol.get("read_only") else ":rw"
            volumes.append(spec)
        else:
            volumes.append(str(vol))
    return volumes


def _restart_value(restart: Any) -> str:
    """Normalize the restart key; YAML turns an unquoted ``no`` into False."""
    if restart is None:
        return ""
    if restart is False:
        return "no"
    return str(restart)


@dataclass
class ComposeService:
    """Parsed docker-compose service."""
    name: str
    image: str = ""
    command: List[str] = field(default_factory=list)
    working_dir: str = ""
    environment: List[str] = field(default_factory=list)
    ports: List[str] = field(default_factory=list)
    volumes: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    privileged: bool = False
    restart: str = ""

    # Keys carried only so they can be reported as unsupported
    build: Optional[Any] = None
    cap_add: List[str] = field(default_factory=list)
    cap_drop: List[str] = field(default_factory=list)
    cgroup_parent: str = ""
    cpuset: str = ""
    cpu_shares: Optional[int] = None
    container_name: str = ""
    devices: List[str] = field(default_factory=list)
    dns: List[str] = field(default_factory=list)
    dns_search: List[str] = field(default_factory=list)
    dockerfile: str = ""
    domainname: str = ""
    entrypoint: List[str] = field(default_factory=list)
    env_file: List[str] = field(default_factory=list)
    expose: List[str] = field(default_factory=list)
    external_links: List[str] = field(default_factory=list)
    extra_hosts: List[str] = field(default_factory=list)
    hostname: str = ""
    ipc: str = ""
    log_driver: str = ""
    log_opt: Dict[str, str] = field(default_factory=dict)
    mem_limit: Optional[Any] = None
    memswap_limit: Optional[Any] = None
    network_mode: str = ""
    pid: str = ""
    read_only: bool = False
    security_opt: List[str] = field(default_factory=list)
    stdin_open: bool = False
    tty: bool = False
    user: str = ""
    uts: str = ""
    volume_driver: str = ""
    volumes_from: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, name: str, data: Optional[Dict]) -> "ComposeService":
        """Parse from docker-compose service definition."""
        data = data or {}

        # Parse command
        command = data.get("command")
        if isinstance(command, str):
            command = shlex.split(command)

        # Parse entrypoint
        entrypoint = data.get("entrypoint")
        if isinstance(entrypoint, str):
            entrypoint = shlex.split(entrypoint)

        # Parse build; the dockerfile may live inside the build mapping
        build = data.get("build")
        dockerfile = data.get("dockerfile", "")
        if isinstance(build, dict):
            dockerfile = build.get("dockerfile", dockerfile)

        # Parse logging (v2+ mapping) or log_driver/log_opt (v1)
        logging_conf = data.get("logging") or {}
        log_driver = logging_conf.get("driver", data.get("log_driver", ""))
        log_opt = logging_conf.get("options", data.get("log_opt")) or {}

        # Parse links and external links
        links = _as_list(data.get("links"))

        return cls(
            name=name,
            image=data.get("image") or "",
            command=_as_list(command),
            working_dir=data.get("working_dir") or "",
            environment=_env_list(data.get("environment")),
            ports=_as_list(data.get("ports")),
            volumes=_volume_list(data.get("volumes")),
            links=links,
            labels=_labels_map(data.get("labels")),
            privileged=bool(data.get("privileged", False)),
            restart=_restart_value(data.get("restart")),
            build=build,
            cap_add=_as_list(data.get("cap_add")),
            cap_drop=_as_list(data.get("cap_drop")),
            cgroup_parent=data.get("cgroup_parent") or "",
            cpuset=str(data.get("cpuset") or ""),
            cpu_shares=data.get("cpu_shares"),
            container_name=data.get("container_name") or "",
            devices=_as_list(data.get("devices")),
            dns=_as_list(data.get("dns")),
            dns_search=_as_list(data.get("dns_search")),
            dockerfile=dockerfile or "",
            domainname=data.get("domainname") or "",
            entrypoint=_as_list(entrypoint),
            env_file=_as_list(data.get("env_file")),
            expose=_as_list(data.get("expose")),
            external_links=_as_list(data.get("external_links")),
            extra_hosts=_as_list(data.get("extra_hosts")),
            hostname=data.get("hostname") or "",
            ipc=data.get("ipc") or "",
            log_driver=log_driver or "",
            log_opt=dict(log_opt),
            mem_limit=data.get("mem_limit"),
            memswap_limit=data.get("memswap_limit"),
            network_mode=data.get("network_mode", data.get("net")) or "",
            pid=data.get("pid") or "",
            read_only=bool(data.get("read_only", False)),
            security_opt=_as_list(data.get("security_opt")),
            stdin_open=bool(data.get("stdin_open", False)),
            tty=bool(data.get("tty", False)),
            user=str(data.get("user") or ""),
            uts=data.get("uts") or "",
            volume_driver=data.get("volume_driver") or "",
            volumes_from=_as_list(data.get("volumes_from")),
        )


@dataclass
class ComposeProject:
    """Parsed docker-compose project."""
    name: str
    path: str
    services: List[ComposeService] = field(default_factory=list)

    @classmethod
    def from_dict(cls, name: str, path: str, data: Optional[Dict]) -> "ComposeProject":
        """Parse from docker-compose.yaml content."""
        data = data or {}

        # Version 1 files keep services at the top level
        if "services" in data:
            service_data = data.get("services") or {}
        else:
            service_data = {k: v for k, v in data.items() if isinstance(v, dict)}

        services = []
        for svc_name, svc_data in service_data.items():
            services.append(ComposeService.from_dict(svc_name, svc_data))

        return cls(name=name, path=path, services=services)

    @property
    def service_names(self) -> List[str]:
        return [s.name for s in self.services]


@dataclass
class ConvertOptions:
    """Options of the convert command."""
    compose_file: str = "docker-compose.yml"
    out_file: Optional[str] = None
    to_stdout: bool = False
    generate_yaml: bool = False
    create_deployment: bool = False
    create_daemonset: bool = False
    create_replicaset: bool = False
    create_chart: bool = False

    @classmethod
    def from_args(cls, args: Any) -> "ConvertOptions":
        """Build options from parsed command line arguments."""
        return cls(
            compose_file=args.file,
            out_file=args.out or None,
            to_stdout=args.stdout,
            generate_yaml=args.yaml,
            create_deployment=args.deployment,
            create_daemonset=args.daemonset,
            create_replicaset=args.replicaset,
            create_chart=args.chart,
        )

    @property
    def single_output(self) -> bool:
        """True when every resource goes to one destination."""
        return bool(self.out_file) or self.to_stdout

    @property
    def controller_kinds(self) -> List[ResourceKind]:
        """Controller kinds requested besides the ReplicationController."""
        kinds = []
        if self.create_deployment:
            kinds.append(ResourceKind.DEPLOYMENT)
        if self.create_daemonset:
            kinds.append(ResourceKind.DAEMON_SET)
        if self.create_replicaset:
            kinds.append(ResourceKind.REPLICA_SET)
        return kinds
