"""
K3s Convert - CLI tool for Docker Compose projects

Converts docker-compose files to Kubernetes Services, ReplicationControllers,
Deployments, DaemonSets and ReplicaSets, and submits them to a cluster.
"""

__version__ = "0.1.0"

from .types import (
    ComposeService,
    ComposeProject,
    ConvertOptions,
    ResourceKind,
    RestartPolicy,
)

from .errors import (
    K3sConvertError,
    MalformedEnvEntry,
    InvalidPort,
    UnknownRestartPolicy,
    SerializationError,
    ConfigurationConflict,
    OutputError,
    ClusterError,
)

from .parser import (
    load_docker_compose,
    parse_compose_project,
)

from .generators import build_resources

from .converter import (
    convert_project,
    validate_options,
)

__all__ = [
    # Types
    "ComposeService",
    "ComposeProject",
    "ConvertOptions",
    "ResourceKind",
    "RestartPolicy",
    # Errors
    "K3sConvertError",
    "MalformedEnvEntry",
    "InvalidPort",
    "UnknownRestartPolicy",
    "SerializationError",
    "ConfigurationConflict",
    "OutputError",
    "ClusterError",
    # Parser
    "load_docker_compose",
    "parse_compose_project",
    # Generators
    "build_resources",
    # Converter
    "convert_project",
    "validate_options",
]
