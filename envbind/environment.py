"""
Environment Snapshots

Every binding call works on an immutable copy of the environment taken once
at the start of the call.
"""

import os
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

from envbind.utils.logger import get_logger

logger = get_logger(__name__)

Environ = Mapping[str, str]


def snapshot_environment(
    environ: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Union[str, Path]] = None
) -> Environ:
    """
    Capture a read-only view of the environment.

    Args:
        environ: Source mapping. Defaults to os.environ.
        dotenv_path: Optional .env file. Its values only fill in names the
            source mapping does not define.

    Returns:
        Immutable name -> value mapping
    """
    snapshot = dict(os.environ if environ is None else environ)

    if dotenv_path is not None:
        path = Path(dotenv_path)
        if path.exists():
            loaded = 0
            for name, value in dotenv_values(path).items():
                # `KEY` without `=` parses to None; treat it as unset
                if value is None or name in snapshot:
                    continue
                snapshot[name] = value
                loaded += 1
            logger.debug(f"Loaded {loaded} variables from {path}")
        else:
            logger.debug(f"No .env file at {path}")

    return MappingProxyType(snapshot)
