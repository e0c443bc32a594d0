"""Unit tests for the public Python API (mathpress.typeset and friends)."""
from __future__ import annotations

import pytest

import mathpress
import mathpress.api as api


class TestPublicApi:
    def test_top_level_exports(self):
        assert callable(mathpress.typeset)
        assert callable(mathpress.transform)
        assert callable(mathpress.supported_outputs)
        assert callable(mathpress.register)
        assert isinstance(mathpress.__version__, str)

    def test_supported_outputs(self):
        assert api.supported_outputs() == ["svg", "chtml", "mathml"]

    def test_typeset_with_dict_config(self):
        html = mathpress.typeset("<p>$x^2$</p>", config={"output": "mathml"})
        assert "<msup>" in html

    def test_typeset_accepts_config_file_path(self, tmp_path):
        cfg = tmp_path / "mathpress.yaml"
        cfg.write_text("output: chtml\n")

        html = mathpress.typeset("<p>$x^2$</p>", config=cfg)

        assert 'jax="CHTML"' in html

    def test_typeset_accepts_config_instance(self):
        config = mathpress.Config(output="chtml")
        assert 'jax="CHTML"' in mathpress.typeset("<p>$x$</p>", config=config)

    def test_transform_respects_extension(self):
        page = "<p>$x$</p>"
        assert mathpress.transform(page, "style.css") == page
        assert "<mjx-container" in mathpress.transform(page, "index.html")

    def test_invalid_config_type(self):
        with pytest.raises(TypeError, match="options must be"):
            mathpress.typeset("<p>$x$</p>", config=3.14)

    def test_unsupported_output(self):
        with pytest.raises(TypeError, match="Supported"):
            mathpress.typeset("<p>$x$</p>", config={"output": "png"})
