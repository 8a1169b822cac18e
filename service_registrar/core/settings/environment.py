"""Boot-time enablement detection for service discovery.

Discovery integration is switched on by the presence of any environment
variable whose *name* contains the discovery marker (``CONSUL_`` by
default). The value is irrelevant. The result is computed once by the
embedding process and handed to the lifecycle as a plain boolean.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

DISCOVERY_ENV_MARKER = "CONSUL_"


def discovery_variables(
    environ: Mapping[str, str] | None = None,
    marker: str = DISCOVERY_ENV_MARKER,
) -> list[str]:
    """Return the sorted names of environment variables carrying the marker.

    Args:
        environ: Environment mapping to scan. Defaults to ``os.environ``.
        marker: Substring looked for in variable names.

    Returns:
        Matching variable names.
    """
    env = os.environ if environ is None else environ
    return sorted(name for name in env if marker in name)


def discovery_enabled(
    environ: Mapping[str, str] | None = None,
    marker: str = DISCOVERY_ENV_MARKER,
) -> bool:
    """Check whether service discovery should be enabled.

    Example:
        >>> discovery_enabled({"CONSUL_HTTP_ADDR": ""})
        True
        >>> discovery_enabled({"PATH": "/usr/bin"})
        False
    """
    return bool(discovery_variables(environ, marker))
