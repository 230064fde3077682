"""
Environment Name Resolver

Decides which environment variable backs a schema field.
"""

from typing import Mapping, NamedTuple, Optional, Sequence

from envbind.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PROBE_ORDER = ('exact', 'upper', 'lower')

_CASINGS = {
    'exact': lambda key: key,
    'upper': lambda key: key.upper(),
    'lower': lambda key: key.lower(),
}


class ResolvedName(NamedTuple):
    """An environment variable name and its raw value (None when unset)."""
    name: str
    value: Optional[str]


def candidate_names(key: str, probe_order: Optional[Sequence[str]] = None) -> list:
    """
    List the variable names probed for a key, in probe order, without duplicates.

    Args:
        key: Schema field key
        probe_order: Casing strategies ('exact', 'upper', 'lower')

    Returns:
        Candidate names
    """
    candidates = []
    for strategy in probe_order or DEFAULT_PROBE_ORDER:
        name = _CASINGS[strategy](key)
        if name not in candidates:
            candidates.append(name)
    return candidates


def resolve_name(
    key: str,
    environ: Mapping[str, str],
    tag: Optional[str] = None,
    probe_order: Optional[Sequence[str]] = None
) -> ResolvedName:
    """
    Resolve the environment variable for a field.

    An explicit tag always wins and is used verbatim. Otherwise the key is
    probed as-is, upper-cased and lower-cased, and the first defined name is
    returned. When nothing is defined the key itself is returned with no
    value, so error messages can still name it.

    Args:
        key: Schema field key
        environ: Environment snapshot
        tag: Explicit variable name
        probe_order: Casing strategies, defaults to exact, upper, lower

    Returns:
        ResolvedName
    """
    if tag:
        return ResolvedName(tag, environ.get(tag))

    for name in candidate_names(key, probe_order):
        if name in environ:
            if name != key:
                logger.debug(f"Resolved field '{key}' to environment variable '{name}'")
            return ResolvedName(name, environ[name])

    return ResolvedName(key, None)
