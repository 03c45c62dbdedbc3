"""
Errors raised by k3sconvert.

Every conversion error is fatal; the CLI catches K3sConvertError once,
prints the message and exits non-zero.
"""


class K3sConvertError(Exception):
    """Base class for all k3sconvert errors."""


class MalformedEnvEntry(K3sConvertError, ValueError):
    """Environment entry has neither '=' nor ':'."""

    def __init__(self, entry: str, service: str = ""):
        self.entry = entry
        self.service = service
        message = f"Invalid container env {entry}"
        if service:
            message += f" for service {service}"
        super().__init__(message)


class InvalidPort(K3sConvertError, ValueError):
    """Port string is not a base-10 integer."""

    def __init__(self, port: str, service: str = ""):
        self.port = port
        self.service = service
        message = f"Invalid container port {port}"
        if service:
            message += f" for service {service}"
        super().__init__(message)


class UnknownRestartPolicy(K3sConvertError, ValueError):
    """Restart policy has no Kubernetes counterpart."""

    def __init__(self, policy: str, service: str):
        self.policy = policy
        self.service = service
        super().__init__(f"Unknown restart policy {policy} for service {service}")


class SerializationError(K3sConvertError):
    """Resource could not be encoded."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Failed to marshal the {kind}")


class ConfigurationConflict(K3sConvertError):
    """Mutually exclusive options were given together."""


class OutputError(K3sConvertError):
    """Writing generated manifests failed."""


class ClusterError(K3sConvertError):
    """A cluster operation failed."""


class ComposeParseError(K3sConvertError):
    """Compose file could not be read as a project."""
