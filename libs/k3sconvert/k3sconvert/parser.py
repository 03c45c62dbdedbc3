"""
Docker Compose parser for k3sconvert.

Loads and parses docker-compose files.
"""

import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ComposeParseError
from .types import ComposeProject

DEFAULT_COMPOSE_FILE = "docker-compose.yml"

ALTERNATIVE_COMPOSE_FILES = [
    "docker-compose.yaml",
    "compose.yaml",
    "compose.yml",
]

_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"


class ComposeLoader(yaml.SafeLoader):
    """SafeLoader without YAML 1.1 base-60 numbers, so 22:22 stays a string."""


ComposeLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_INT_TAG, _FLOAT_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
ComposeLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"""^(?:[-+]?0b[0-1_]+
    |[-+]?0[0-7_]+
    |[-+]?(?:0|[1-9][0-9_]*)
    |[-+]?0x[0-9a-fA-F_]+)$""", re.X),
    list("-+0123456789"),
)
ComposeLoader.add_implicit_resolver(
    _FLOAT_TAG,
    re.compile(r"""^(?:[-+]?(?:[0-9][0-9_]*)\.[0-9_]*(?:[eE][-+][0-9]+)?
    |\.[0-9_]+(?:[eE][-+][0-9]+)?
    |[-+]?\.(?:inf|Inf|INF)
    |\.(?:nan|NaN|NAN))$""", re.X),
    list("-+0123456789."),
)


def find_compose_file(compose_file: str = DEFAULT_COMPOSE_FILE) -> Path:
    """
    Locate a compose file.

    Args:
        compose_file: Path to the compose file

    Returns:
        Path of the compose file, or of an alternative name in the same
        directory if it does not exist

    Raises:
        FileNotFoundError: If no compose file is found
    """
    compose_path = Path(compose_file)
    if compose_path.exists():
        return compose_path

    for alt in ALTERNATIVE_COMPOSE_FILES:
        alt_path = compose_path.parent / alt
        if alt_path.exists():
            return alt_path

    raise FileNotFoundError(
        f"No docker-compose file found at {compose_file}. "
        f"Tried: {compose_path.name}, {', '.join(ALTERNATIVE_COMPOSE_FILES)}"
    )


def load_docker_compose(compose_file: str = DEFAULT_COMPOSE_FILE) -> Dict[str, Any]:
    """
    Load a docker-compose file.

    Returns:
        Parsed YAML content

    Raises:
        FileNotFoundError: If compose file not found
        ComposeParseError: If the file is not a YAML mapping
    """
    compose_path = find_compose_file(compose_file)

    try:
        with open(compose_path) as f:
            data = yaml.load(f, Loader=ComposeLoader)
    except yaml.YAMLError as e:
        raise ComposeParseError(
            f"Failed to parse the compose project from {compose_path}: {e}"
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ComposeParseError(
            f"Failed to parse the compose project from {compose_path}: "
            f"expected a mapping, got {type(data).__name__}"
        )
    return data


def parse_compose_project(
    compose_file: str = DEFAULT_COMPOSE_FILE,
    name: Optional[str] = None,
) -> ComposeProject:
    """
    Parse a docker-compose project.

    Args:
        compose_file: Path to the compose file
        name: Project name (default: name of the containing directory)

    Returns:
        Parsed ComposeProject
    """
    data = load_docker_compose(compose_file)
    path = Path(compose_file).resolve().parent
    return ComposeProject.from_dict(name or path.name, str(path), data)
