"""
Shared pytest fixtures and configuration for mathpress tests.

This module provides:
- Configuration fixtures (default, per output mode)
- HTML page fixtures
- A fake static-site host for registration tests
- Global pytest configuration
"""
from __future__ import annotations

import pytest


# ==============================================================================
# Global pytest configuration
# ==============================================================================

def pytest_configure(config):
    """Global pytest configuration - runs once at test session start."""
    # Set matplotlib backend to non-interactive
    import matplotlib
    matplotlib.use('Agg')

    # Suppress warnings from dependencies
    import warnings
    warnings.filterwarnings('ignore', category=DeprecationWarning)
    warnings.filterwarnings('ignore', category=PendingDeprecationWarning)


@pytest.fixture(autouse=True)
def reset_matplotlib():
    """Reset matplotlib state between tests."""
    import matplotlib.pyplot as plt
    yield
    plt.close('all')


# ==============================================================================
# Configuration fixtures
# ==============================================================================

@pytest.fixture
def default_config():
    """Return default configuration."""
    from mathpress.config import Config
    return Config()


@pytest.fixture
def chtml_config():
    """Return configuration selecting styled-HTML output."""
    from mathpress.config import Config
    return Config(output="chtml")


@pytest.fixture
def mathml_config():
    """Return configuration selecting MathML output."""
    from mathpress.config import Config
    return Config(output="mathml")


@pytest.fixture
def strict_config():
    """Return SVG configuration without noerrors: failures raise."""
    from mathpress.config import Config, TexConfig
    return Config(tex=TexConfig(packages=["base", "ams", "configmacros"]))


# ==============================================================================
# Page fixtures
# ==============================================================================

@pytest.fixture
def math_page():
    """Return a full page with inline and display math."""
    return (
        "<!DOCTYPE html>\n"
        "<html><head><title>Notes</title></head>\n"
        "<body><p>The identity $x^2$ holds.</p>\n"
        "<p>$$a + b$$</p></body></html>"
    )


@pytest.fixture
def plain_page():
    """Return a full page without any math."""
    return (
        "<!DOCTYPE html>\n"
        "<html><head><title>Plain</title></head>\n"
        "<body><p>Nothing to typeset here.</p></body></html>"
    )


# ==============================================================================
# Host fixtures
# ==============================================================================

class FakeSite:
    """Minimal static-site host: records transforms, optionally version-checks."""

    def __init__(self, version_error=None):
        self.transforms = {}
        self.checked = []
        self._version_error = version_error

    def add_transform(self, name, callback):
        self.transforms[name] = callback

    def version_check(self, requirement):
        self.checked.append(requirement)
        if self._version_error is not None:
            raise self._version_error


@pytest.fixture
def fake_site():
    """Return a host whose version check passes."""
    return FakeSite()


@pytest.fixture
def outdated_site():
    """Return a host whose version check fails."""
    return FakeSite(version_error=RuntimeError("host 1.0.0 does not satisfy >=2.0"))
