"""
Unit tests for SVG output rendered with matplotlib mathtext.
"""
import re

import pytest

from mathpress.config import Config, SvgConfig
from mathpress.renderers.svg_renderer import GLOBAL_CACHE_ID, SvgRenderer
from mathpress.tex import MathRenderError
from mathpress.transformer import MathTransform


def _svg_transform(**svg_options):
    return MathTransform(Config(svg=SvgConfig(**svg_options)))


class TestSvgSetup:
    def test_invalid_font_cache(self):
        with pytest.raises(ValueError, match="Unsupported font cache"):
            SvgRenderer(Config(svg=SvgConfig(font_cache="shared")))

    def test_stylesheet_uses_options(self):
        css = SvgRenderer(Config(svg=SvgConfig(scale=1.5, display_align="left"))).stylesheet()
        assert 'mjx-container[jax="SVG"]' in css
        assert "font-size: 150%" in css
        assert "text-align: left" in css
        assert "mjx-assistive-mml" in css


class TestSvgTypesetting:
    def test_inline_math(self, math_page):
        html = _svg_transform().typeset(math_page)
        assert '<mjx-container class="MathJax" jax="SVG">' in html
        assert '<svg xmlns="http://www.w3.org/2000/svg"' in html
        assert 'role="img"' in html
        assert "The identity <mjx-container" in html
        assert "</mjx-container> holds." in html
        assert "$x^2$" not in html

    def test_display_math(self, math_page):
        html = _svg_transform().typeset(math_page)
        assert '<mjx-container class="MathJax" jax="SVG" display="true">' in html

    def test_svg_sized_in_em(self):
        html = _svg_transform().typeset("<p>$x$</p>")
        svg = re.search(r"<svg [^>]*>", html).group(0)
        assert re.search(r'width="[\d.]+em"', svg)
        assert re.search(r'height="[\d.]+em"', svg)
        assert "vertical-align:" in svg

    def test_matplotlib_scaffolding_removed(self):
        html = _svg_transform().typeset("<p>$x$</p>")
        assert "<?xml" not in html
        assert "<metadata>" not in html
        assert "figure_1" not in html

    def test_assistive_mathml(self):
        html = _svg_transform().typeset("<p>$x^2$</p>")
        assert '<mjx-assistive-mml unselectable="on" display="inline">' in html
        assert "<msup>" in html
        assert 'aria-hidden="true"' in html

    def test_assistive_mathml_disabled(self):
        html = MathTransform(Config(assistive_mml=False)).typeset("<p>$x^2$</p>")
        assert "mjx-assistive-mml>" not in html
        assert "<msup>" not in html

    def test_environment_rows(self):
        html = _svg_transform().typeset(r"<p>\begin{align}a &= b \\ c &= d\end{align}</p>")
        assert html.count("<mjx-row>") == 2
        assert "<mtable>" in html


class TestFontCache:
    def test_global_cache_holds_each_glyph_once(self):
        html = _svg_transform(font_cache="global").typeset(
            "<html><body><p>$x$ and $x + x$</p></body></html>"
        )
        assert f'<svg id="{GLOBAL_CACHE_ID}"' in html
        ids = re.findall(r'<path id="(MJX-[^"]+)"', html)
        assert ids
        assert len(ids) == len(set(ids))
        assert 'href="#MJX-' in html

    def test_global_cache_is_last_in_body(self):
        html = _svg_transform(font_cache="global").typeset(
            "<html><body><p>$x$</p><p>end</p></body></html>"
        )
        assert html.index("<p>end</p>") < html.index(GLOBAL_CACHE_ID)
        assert html.rstrip().endswith("</svg></body></html>")

    def test_local_cache(self):
        html = _svg_transform(font_cache="local").typeset("<p>$x$ and $y$</p>")
        assert GLOBAL_CACHE_ID not in html
        assert html.count("<defs>") == 2
        assert 'href="#MJX-1-' in html
        assert 'href="#MJX-2-' in html

    def test_no_cache_inlines_paths(self):
        html = _svg_transform(font_cache="none").typeset("<p>$x$</p>")
        assert GLOBAL_CACHE_ID not in html
        assert "<use" not in html
        assert "<defs>" not in html
        assert "<path d=" in html


class TestSvgErrors:
    def test_malformed_tex_renders_error_box_by_default(self, default_config):
        html = MathTransform(default_config).typeset(r"<p>$\frac{1}$</p>")
        assert "<mjx-merror" in html
        assert r"$\frac{1}$" in html

    def test_malformed_tex_raises_without_noerrors(self, strict_config):
        transform = MathTransform(strict_config)
        with pytest.raises(MathRenderError) as excinfo:
            transform.typeset(r"<p>$\frac{1}$</p>")
        assert isinstance(excinfo.value, ValueError)
        assert excinfo.value.__cause__ is not None
