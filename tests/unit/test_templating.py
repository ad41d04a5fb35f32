"""Unit tests for template transformations."""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import pytest

from blockforge.engines.templating import (
    InnerContentProcessor,
    PhpCliRenderer,
    RegexAttributeParser,
    SymbolProcessor,
    TemplateRenderer,
    expand_block_props,
    file_has_symbols,
    has_symbols,
    normalize_self_closing_tags,
    templates_with_symbols,
    to_kebab_case,
)
from blockforge.errors import RenderError


class FakeRenderer(TemplateRenderer):
    """Renders from a dict of file name -> callable(variables)."""

    def __init__(self, outputs: Dict[str, Any]):
        self.outputs = outputs
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def render(self, path: Path, variables: Mapping[str, Any]) -> str:
        self.calls.append((Path(path).name, dict(variables)))
        output = self.outputs[Path(path).name]
        if isinstance(output, Exception):
            raise output
        return output(variables) if callable(output) else output


@pytest.fixture
def block_dir(tmp_path: Path) -> Path:
    """blocks/hero next to blocks/symbols."""
    hero = tmp_path / "blocks" / "hero"
    hero.mkdir(parents=True)
    (tmp_path / "blocks" / "symbols").mkdir()
    return hero


def _add_symbol(block_dir: Path, name: str, body: str = "<?php // symbol ?>") -> Path:
    path = block_dir.parent / "symbols" / f"{name}.php"
    path.write_text(body)
    return path


class TestExpandBlockProps:
    """Tests for blockProps placeholder expansion."""

    def test_only_placeholder(self):
        assert expand_block_props("<div blockProps>") == "<div <?php echo get_block_wrapper_attributes(); ?>>"

    def test_class_seeds_wrapper_call(self):
        template = '<section blockProps class="hero wide" id="top">Hi</section>'
        assert expand_block_props(template) == (
            "<section <?php echo get_block_wrapper_attributes(array( 'class' => 'hero wide' )); ?>"
            ' id="top">Hi</section>'
        )

    def test_class_before_placeholder_is_kept(self):
        template = '<div class="card" blockProps>'
        assert expand_block_props(template) == (
            '<div class="card" <?php echo get_block_wrapper_attributes(); ?>>'
        )

    def test_other_attributes_without_class(self):
        template = '<div blockProps data-id="7">'
        assert expand_block_props(template) == (
            '<div <?php echo get_block_wrapper_attributes(); ?> data-id="7">'
        )

    def test_case_insensitive(self):
        assert expand_block_props("<div BLOCKPROPS>") == "<div <?php echo get_block_wrapper_attributes(); ?>>"

    def test_no_placeholder_is_unchanged(self):
        template = '<div class="blockPropsHelper"><?php echo $x; ?></div>\n<p data-blockprops-like>t</p>'
        assert expand_block_props(template) == template

    def test_symbol_tags_left_alone(self):
        template = '<div blockProps><Button label="Go"/></div>'
        assert expand_block_props(template) == (
            '<div <?php echo get_block_wrapper_attributes(); ?>><Button label="Go"/></div>'
        )


class TestAttributeParser:
    """Tests for RegexAttributeParser."""

    def test_quoted_values_verbatim(self):
        parser = RegexAttributeParser()
        assert parser.parse("""type="primary" text='Click &amp; go' count="3" """) == {
            "type": "primary",
            "text": "Click &amp; go",
            "count": "3",
        }

    def test_bare_and_unquoted_ignored(self):
        assert RegexAttributeParser().parse("disabled size=3 title=\"x\"") == {"title": "x"}

    def test_empty(self):
        assert RegexAttributeParser().parse("") == {}


class TestSymbolHelpers:
    """Tests for symbol detection helpers."""

    def test_kebab_case(self):
        assert to_kebab_case("Button") == "button"
        assert to_kebab_case("ProductCard") == "product-card"
        assert to_kebab_case("SocialIcons2") == "social-icons2"

    def test_has_symbols(self):
        assert has_symbols('<ProductCard title="a" />')
        assert has_symbols("<Button/>")
        assert not has_symbols("<div><span>lower</span></div>")
        assert not has_symbols("<Button>not self closing</Button>")

    def test_file_helpers(self, block_dir):
        render = block_dir / "render.php"
        assert not file_has_symbols(render)
        render.write_text("<div><Card /></div>")
        other = block_dir.parent / "plain"
        other.mkdir()
        (other / "render.php").write_text("<div>plain</div>")

        assert file_has_symbols(render)
        assert templates_with_symbols(block_dir.parent) == [render]
        assert templates_with_symbols(block_dir.parent / "missing") == []


class TestNormalizeSelfClosingTags:
    """Tests for self-closing tag normalization."""

    def test_non_void_tags_get_closed(self):
        html = '<button class="b" /><span/>'
        assert normalize_self_closing_tags(html) == '<button class="b"></button><span></span>'

    def test_void_and_svg_tags_exempt(self):
        html = '<img src="a.png" /><br/><svg><path d="M0" /><circle r="1"/></svg>'
        assert normalize_self_closing_tags(html) == html


class TestSymbolProcessor:
    """Tests for symbol resolution."""

    def test_resolves_with_attributes(self, block_dir):
        _add_symbol(block_dir, "social-icons")
        renderer = FakeRenderer({
            "social-icons.php": lambda v: f"<a href=\"https://x.com/{v['symbol_attrs']['twitter']}\">x</a>",
        })
        processor = SymbolProcessor(renderer)

        output = processor.process_symbols('<footer><SocialIcons twitter="x" /></footer>', block_dir)

        assert output == '<footer><a href="https://x.com/x">x</a></footer>'
        assert renderer.calls == [("social-icons.php", {"symbol_attrs": {"twitter": "x"}})]

    def test_missing_symbol_becomes_comment(self, block_dir):
        processor = SymbolProcessor(FakeRenderer({}))
        output = processor.process_symbols('<SocialIcons twitter="x" />', block_dir)
        assert output == "<!-- Symbol not found: social-icons.php -->"

    def test_reserved_components_untouched(self, block_dir):
        _add_symbol(block_dir, "inner-blocks")
        renderer = FakeRenderer({})
        template = '<div><InnerBlocks /><RichText tagName="p" /></div>'

        assert SymbolProcessor(renderer).process_symbols(template, block_dir) == template
        assert renderer.calls == []

    def test_failed_render_becomes_comment(self, block_dir, caplog):
        _add_symbol(block_dir, "card")
        renderer = FakeRenderer({"card.php": RenderError("Rendering card.php failed", label="card.php")})

        output = SymbolProcessor(renderer).process_symbols("<p><Card /></p>", block_dir)

        assert output == "<p><!-- Symbol failed to render: card.php --></p>"
        assert "card.php" in caplog.text

    def test_symbol_output_normalized(self, block_dir):
        _add_symbol(block_dir, "button")
        renderer = FakeRenderer({"button.php": '<button class="btn" /><img src="i.png" />'})

        output = SymbolProcessor(renderer).process_symbols('<Button label="Go"/>', block_dir)

        assert output == '<button class="btn"></button><img src="i.png" />'

    def test_process_template_renders_then_resolves(self, block_dir):
        _add_symbol(block_dir, "button")
        (block_dir / "render.php").write_text("<?php // template ?>")
        renderer = FakeRenderer({
            "render.php": lambda v: f"<div>{v['attributes']['heading']}<Button /></div>",
            "button.php": "<button>Go</button>",
        })

        output = SymbolProcessor(renderer).process_template(
            block_dir / "render.php", {"heading": "Hi"}, "", None
        )

        assert output == "<div>Hi<button>Go</button></div>"
        assert renderer.calls[0][1]["block_attributes"] == {"heading": "Hi"}

    def test_process_template_missing_file(self, block_dir):
        assert SymbolProcessor(FakeRenderer({})).process_template(block_dir / "render.php") == ""


class _Inner(InnerContentProcessor):
    def __init__(self, has_inner: bool):
        self.has_inner = has_inner

    def has_inner_content(self, template_path):
        return self.has_inner

    def process_template(self, template_path, attributes, content, block=None):
        return f"<div class=\"inner\">{content}<Card /></div>"


class TestRenderCallback:
    """Tests for render callback composition."""

    def test_inner_content_runs_before_symbols(self, block_dir):
        _add_symbol(block_dir, "card")
        renderer = FakeRenderer({"card.php": "<article>card</article>"})
        callback = SymbolProcessor(renderer).create_render_callback(block_dir / "render.php", _Inner(True))

        output = callback({}, "<p>child</p>", None)

        assert output == '<div class="inner"><p>child</p><article>card</article></div>'

    def test_without_inner_content_renders_template(self, block_dir):
        (block_dir / "render.php").write_text("<?php // template ?>")
        renderer = FakeRenderer({"render.php": "<p>plain</p>"})
        callback = SymbolProcessor(renderer).create_render_callback(block_dir / "render.php", _Inner(False))

        assert callback({}, "", None) == "<p>plain</p>"


class TestPhpCliRenderer:
    """Tests for PhpCliRenderer with a stand-in binary."""

    def test_passes_payload_on_stdin(self, block_dir, fake_php):
        template = block_dir / "render.php"
        template.write_text("<?php echo 1; ?>")
        renderer = PhpCliRenderer(fake_php("cat"))

        payload = json.loads(renderer.render(template, {"symbol_attrs": {"label": "Go"}}))

        assert payload == {"file": str(template.resolve()), "variables": {"symbol_attrs": {"label": "Go"}}}

    def test_non_zero_exit_is_render_error(self, block_dir, fake_php):
        renderer = PhpCliRenderer(fake_php("echo 'PHP Fatal error' >&2; exit 255"))

        with pytest.raises(RenderError) as exc_info:
            renderer.render(block_dir / "card.php", {})

        assert exc_info.value.label == "card.php"
        assert exc_info.value.details["stderr"] == "PHP Fatal error"

    def test_no_binary(self, block_dir):
        with pytest.raises(RenderError):
            PhpCliRenderer(None).render(block_dir / "card.php", {})

    def test_timeout(self, block_dir, fake_php):
        renderer = PhpCliRenderer(fake_php("exec sleep 5"), timeout=0.2)
        with pytest.raises(RenderError, match="timed out"):
            renderer.render(block_dir / "card.php", {})
