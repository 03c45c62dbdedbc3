"""
Serialization and output of generated manifests.

Manifests are rendered as indented JSON (default) or YAML and written either
to one file per resource, to a single aggregate file, or to stdout.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

import yaml

from .errors import OutputError, SerializationError
from .types import ResourceKind

logger = logging.getLogger(__name__)

YAML_SEPARATOR = "---"


class _NoAliasDumper(yaml.SafeDumper):
    """Dumper that never emits anchors for repeated objects."""

    def ignore_aliases(self, data):
        return True


def serialize(
    resource: Dict[str, Any],
    kind: ResourceKind,
    generate_yaml: bool = False,
) -> bytes:
    """
    Render a manifest to JSON or YAML.

    Args:
        resource: Manifest dict
        kind: Resource kind, used in error messages
        generate_yaml: Render YAML instead of JSON

    Returns:
        Encoded manifest

    Raises:
        SerializationError: If the manifest cannot be encoded
    """
    try:
        if generate_yaml:
            text = yaml.dump(
                resource,
                Dumper=_NoAliasDumper,
                default_flow_style=False,
                sort_keys=False,
            )
        else:
            text = json.dumps(resource, indent=2)
    except (TypeError, ValueError, yaml.YAMLError) as e:
        raise SerializationError(kind.kind) from e

    logger.debug(f"{kind.kind} {resource.get('metadata', {}).get('name')}:\n{text}")
    return text.encode("utf-8")


def output_filename(name: str, kind: ResourceKind, generate_yaml: bool = False) -> str:
    """File name of a resource written on its own."""
    ext = "yaml" if generate_yaml else "json"
    return f"{name}-{kind.value}.{ext}"


class OutputSink:
    """
    Destination for serialized manifests.

    With ``to_stdout`` every manifest goes to ``stream`` (stdout by default),
    with ``out_file`` all manifests are appended to that one file, otherwise
    each manifest is written to ``<output_dir>/<name>-<kind>.<ext>``.
    """

    def __init__(
        self,
        generate_yaml: bool = False,
        out_file: Optional[str] = None,
        to_stdout: bool = False,
        stream: Optional[TextIO] = None,
        output_dir: str = ".",
    ):
        self.generate_yaml = generate_yaml
        self.out_file = out_file
        self.to_stdout = to_stdout
        self.stream = stream
        self.output_dir = Path(output_dir)
        self._file = None

        if out_file and not to_stdout:
            try:
                self._file = open(out_file, "wb")
            except OSError as e:
                raise OutputError(f"error opening file: {e}") from e

    @property
    def separator(self) -> str:
        return YAML_SEPARATOR if self.generate_yaml else ""

    def write(self, name: str, kind: ResourceKind, data: bytes) -> Optional[Path]:
        """
        Write one serialized manifest.

        Returns:
            Path of the written file in per-resource mode, else None
        """
        if self.to_stdout:
            stream = self.stream or sys.stdout
            stream.write(f"{data.decode('utf-8')}{self.separator}\n")
            return None

        if self._file is not None:
            try:
                self._file.write(data + f"{self.separator}\n".encode("utf-8"))
                self._file.flush()
            except OSError as e:
                raise OutputError(f"Failed to write {kind.value} to file: {e}") from e
            return None

        path = self.output_dir / output_filename(name, kind, self.generate_yaml)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise OutputError(f"Failed to write {kind.value}: {e}") from e
        print(f'file "{path}" created')
        return path

    def close(self, report: bool = True) -> None:
        """Close the aggregate file and report it."""
        if self._file is None:
            return
        self._file.close()
        self._file = None
        if report:
            print(f'file "{self.out_file}" created')

    def __enter__(self) -> "OutputSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(report=exc_type is None)
