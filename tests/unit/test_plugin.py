"""
Unit tests for registering the transform with a static-site host.
"""
import pytest

from mathpress.plugin import HOST_COMPATIBILITY, register, version_check
from mathpress.transformer import MathTransform


class TestRegister:
    def test_registers_transform(self, fake_site):
        transform = register(fake_site)
        assert isinstance(transform, MathTransform)
        assert fake_site.transforms == {"mathpress": transform}
        assert fake_site.checked == [HOST_COMPATIBILITY]

    def test_custom_name_and_options(self, fake_site):
        transform = register(fake_site, {"output": "chtml"}, name="math")
        assert fake_site.transforms["math"] is transform
        assert transform.config.output == "chtml"

    def test_registered_callback_runs(self, fake_site, math_page):
        register(fake_site)
        callback = fake_site.transforms["mathpress"]
        assert callback(math_page, "about.json") is math_page
        assert "<mjx-container" in callback(math_page, "about/index.html")

    def test_incompatible_host_warns_and_continues(self, outdated_site):
        with pytest.warns(RuntimeWarning, match="version check failed"):
            register(outdated_site)
        assert "mathpress" in outdated_site.transforms

    def test_host_without_version_check(self):
        class Host:
            def __init__(self):
                self.transforms = {}

            def add_transform(self, name, callback):
                self.transforms[name] = callback

        host = Host()
        register(host)
        assert "mathpress" in host.transforms

    def test_unsupported_output_registers_nothing(self, fake_site):
        with pytest.raises(TypeError):
            register(fake_site, {"output": "latex"})
        assert fake_site.transforms == {}


class TestVersionCheck:
    def test_satisfied(self):
        version_check("2.0.1", ">=2.0")

    def test_not_satisfied(self):
        with pytest.raises(ValueError, match="does not satisfy"):
            version_check("1.4.2", ">=2.0")

    def test_unparseable_version(self):
        with pytest.raises(ValueError, match="Cannot compare"):
            version_check("not-a-version", ">=2.0")
