"""
Registration against a generic static-site host.

Any object with ``add_transform(name, callback)`` can host the transform.
When it also has ``version_check(requirement)``, the requirement below is
checked first; an incompatible host only triggers a warning.
"""
from __future__ import annotations

import warnings
from typing import Any

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from .transformer import MathTransform, Options

HOST_COMPATIBILITY = ">=2.0"


def register(site: Any, options: Options = None, *, name: str = "mathpress") -> MathTransform:
    """Build a MathTransform from ``options`` and register it with ``site``.

    Raises:
        TypeError: the configured output mode is not supported.
    """
    check = getattr(site, "version_check", None)
    if callable(check):
        try:
            check(HOST_COMPATIBILITY)
        except Exception as exc:  # host-defined error types
            warnings.warn(
                f"mathpress: host version check failed ({exc}); continuing the build.",
                RuntimeWarning,
                stacklevel=2,
            )
    transform = MathTransform(options)
    site.add_transform(name, transform)
    return transform


def version_check(version: str, compatibility: str) -> None:
    """Raise ValueError unless ``version`` satisfies ``compatibility``."""
    try:
        ok = Version(version) in SpecifierSet(compatibility)
    except (InvalidVersion, InvalidSpecifier) as exc:
        raise ValueError(f"Cannot compare version {version!r} with {compatibility!r}") from exc
    if not ok:
        raise ValueError(f"Version {version} does not satisfy {compatibility}")
