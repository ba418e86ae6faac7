"""
Tests for page materialization.
"""

import json

import pytest

from site_publisher.entities import ContentItem
from site_publisher.services import PageMaterializer
from site_publisher.services.materializer import (
    DATA_SCRIPT_PATTERN,
    DEV_SCRIPTS,
    extract_data_script,
    extract_description,
)


@pytest.fixture
def materializer(tmp_path):
    return PageMaterializer(build_dir=tmp_path, base_url="https://example.com/", site_name="Example")


def test_rerun_is_byte_identical(materializer, article):
    first = materializer.materialize(article).read_bytes()
    second = materializer.materialize(article).read_bytes()
    assert first == second


def test_document_has_exactly_one_data_script(materializer, article):
    html = materializer.render(article)

    assert len(DATA_SCRIPT_PATTERN.findall(html)) == 1
    assert DEV_SCRIPTS in html
    assert '<link rel="canonical" href="https://example.com/article/hello-world" />' in html


def test_embedded_payload_escapes_script_close(materializer, article):
    script = extract_data_script(materializer.render(article))

    assert "</script>" not in script[: -len("</script>")]
    body = script.split(">", 1)[1].rsplit("</script>", 1)[0]
    assert json.loads(body.replace("<\\/script>", "</script>"))["content"] == article.content


def test_context_document_path_and_payload(materializer, context_doc, tmp_path):
    path = materializer.materialize(context_doc)

    assert path == tmp_path / "context" / "principles" / "integrity" / "index.html"
    html = path.read_text()
    assert 'id="context-data"' in html
    assert "Do what you said you would do." in html


def test_unknown_category_is_rejected(materializer):
    with pytest.raises(ValueError):
        materializer.render(ContentItem(slug="x", title="X", content="", category="video"))


def test_title_is_html_escaped(materializer):
    item = ContentItem(slug="x", title="<b>Bold</b> & more", content="", status="published")
    html = materializer.render(item)
    assert "<title>&lt;b&gt;Bold&lt;/b&gt; &amp; more | Example</title>" in html


def test_extract_description_strips_markdown():
    content = "# Title\n\nThis is **bold** and `code` with a [link](https://x.y).\n\nSecond."
    assert extract_description(content) == "This is bold and code with a link."


def test_extract_description_truncates():
    description = extract_description("word " * 100, max_length=40)
    assert description.endswith("...")
    assert len(description) <= 40
