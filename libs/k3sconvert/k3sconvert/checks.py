"""Checks for compose keys that are not converted."""

import dataclasses
import logging
from typing import List

from .types import UNSUPPORTED_KEYS, ComposeService

logger = logging.getLogger(__name__)


def _field_default(f: dataclasses.Field):
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return f.default


def check_unsupported_keys(service: ComposeService) -> List[str]:
    """
    Warn about every unsupported key set on a service.

    Args:
        service: Compose service

    Returns:
        Names of the unsupported keys that are set, in field order
    """
    found = []
    for f in dataclasses.fields(service):
        if f.name not in UNSUPPORTED_KEYS:
            continue
        if getattr(service, f.name) != _field_default(f):
            logger.warning(f"Unsupported key {f.name} - ignoring")
            found.append(f.name)
    return found
