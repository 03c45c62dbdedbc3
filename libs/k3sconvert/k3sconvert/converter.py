"""
Conversion of a whole compose project.

Validates the convert options, generates the manifests of every service and
writes the requested kinds in a fixed order: Services, Deployments,
DaemonSets, ReplicaSets, then ReplicationControllers.
"""

import logging
from typing import Dict, List, Optional, TextIO, Tuple

from .checks import check_unsupported_keys
from .errors import ConfigurationConflict
from .generators import build_resources
from .output import OutputSink, serialize
from .types import ComposeProject, ConvertOptions, ResourceKind

logger = logging.getLogger(__name__)


def validate_options(options: ConvertOptions) -> None:
    """
    Reject option combinations that cannot be honoured.

    Raises:
        ConfigurationConflict: On mutually exclusive options
    """
    if options.out_file and options.to_stdout:
        raise ConfigurationConflict("--out and --stdout can't be set at the same time")

    if options.create_chart and options.to_stdout:
        raise ConfigurationConflict("chart cannot be generated when --stdout is specified")

    if options.single_output and len(options.controller_kinds) > 1:
        raise ConfigurationConflict(
            "only one type of Kubernetes controller can be generated "
            "when --out or --stdout is specified"
        )


def emitted_kinds(options: ConvertOptions) -> List[ResourceKind]:
    """Resource kinds written for the options, in emission order."""
    kinds = [ResourceKind.SERVICE]
    kinds.extend(options.controller_kinds)
    # A single destination holds at most one controller kind
    if not options.single_output or not options.controller_kinds:
        kinds.append(ResourceKind.REPLICATION_CONTROLLER)
    return kinds


def link_targets(project: ComposeProject) -> List[str]:
    """Distinct linked service names in first-seen order; aliases dropped."""
    targets: List[str] = []
    for service in project.services:
        for link in service.links:
            target = link.split(":", 1)[0].strip()
            if target and target not in targets:
                targets.append(target)
    return targets


def convert_project(
    project: ComposeProject,
    options: ConvertOptions,
    stream: Optional[TextIO] = None,
    output_dir: str = ".",
) -> List[Tuple[str, ResourceKind]]:
    """
    Convert a compose project and write its manifests.

    Args:
        project: Parsed compose project
        options: Convert options
        stream: Stream used with --stdout (default: sys.stdout)
        output_dir: Directory for per-resource files

    Returns:
        (service name, kind) of every manifest written, in order

    Raises:
        K3sConvertError: On any conversion or output failure
    """
    validate_options(options)

    if options.create_chart:
        logger.warning("Helm chart generation is not supported, ignoring --chart")

    kinds = emitted_kinds(options)
    payloads: Dict[ResourceKind, Dict[str, Optional[bytes]]] = {k: {} for k in kinds}

    for service in project.services:
        check_unsupported_keys(service)

        resources = build_resources(service)
        for kind in kinds:
            payloads[kind][service.name] = serialize(
                resources[kind], kind, options.generate_yaml
            )

    # Linked services missing from the project only get a name placeholder
    services = payloads[ResourceKind.SERVICE]
    for target in link_targets(project):
        if target not in services:
            logger.debug(f"Linked service {target} is not defined in the project")
            services[target] = None

    emitted: List[Tuple[str, ResourceKind]] = []
    with OutputSink(
        generate_yaml=options.generate_yaml,
        out_file=options.out_file,
        to_stdout=options.to_stdout,
        stream=stream,
        output_dir=output_dir,
    ) as sink:
        for kind in kinds:
            for name, data in payloads[kind].items():
                if data is None:
                    continue
                sink.write(name, kind, data)
                emitted.append((name, kind))

    return emitted
