"""
Tests for content-addressed naming and manifest construction.
"""

import json

import pytest

from site_publisher.entities import BuildOutput
from site_publisher.errors import ManifestConflictError
from site_publisher.services import ManifestBuilder, content_hash
from site_publisher.services.fingerprint import (
    collect_outputs,
    content_payload_outputs,
    fingerprint_name,
)


@pytest.fixture
def builder():
    return ManifestBuilder(hash_length=8)


def _outputs():
    return [
        BuildOutput(name="assets/main.js", content=b"console.log('hi')"),
        BuildOutput(name="assets/style.css", content=b"body{margin:0}"),
        BuildOutput(name="robots.txt", content=b"User-agent: *"),
    ]


def test_content_hash_is_stable_and_sized():
    assert content_hash(b"abc", 8) == content_hash(b"abc", 8)
    assert len(content_hash(b"abc", 12)) == 12
    assert content_hash(b"abc", 8) != content_hash(b"abd", 8)


def test_fingerprint_name_inserts_digest():
    assert fingerprint_name("assets/main.js", "deadbeef") == "assets/main.deadbeef.js"
    assert fingerprint_name("robots.txt", "deadbeef") is None


def test_same_input_gives_same_manifest(builder, article):
    first, _ = builder.build(_outputs() + content_payload_outputs([article]), [article])
    second, _ = builder.build(_outputs() + content_payload_outputs([article]), [article])
    assert first.to_dict() == second.to_dict()


def test_changed_content_changes_only_that_path(builder):
    before, _ = builder.build(_outputs())
    changed = _outputs()
    changed[0] = BuildOutput(name="assets/main.js", content=b"console.log('bye')")
    after, _ = builder.build(changed)

    assert before.get("assets/main.js").path != after.get("assets/main.js").path
    assert before.get("assets/style.css") == after.get("assets/style.css")


def test_unsupported_outputs_are_kept_but_not_listed(builder):
    manifest, files = builder.build(_outputs())

    assert manifest.get("robots.txt") is None
    assert "robots.txt" in [output.name for output in files]
    assert len(manifest.entries) == 2


def test_every_manifest_path_is_written(builder, article, context_doc, tmp_path):
    items = [article, context_doc]
    manifest, files = builder.build(_outputs() + content_payload_outputs(items), items)
    manifest_path = builder.write(files, manifest, tmp_path)

    for entry in manifest.entries:
        assert (tmp_path / entry.path).is_file()
        assert content_hash((tmp_path / entry.path).read_bytes(), 8) == entry.content_hash

    written = json.loads(manifest_path.read_text())
    assert written["assets"]["article/hello-world"]["path"].startswith("/content/article/")
    assert [item["category"] for item in written["items"]] == ["article", "context"]
    assert "data" in written["items"][1]


def test_duplicate_key_aborts(builder):
    outputs = [
        BuildOutput(name="assets/a.js", content=b"1", key="app"),
        BuildOutput(name="assets/b.js", content=b"2", key="app"),
    ]
    with pytest.raises(ManifestConflictError):
        builder.build(outputs)


def test_shared_addressed_path_aborts(builder):
    outputs = [
        BuildOutput(name="assets/a.js", content=b"same", key="one"),
        BuildOutput(name="assets/a.js", content=b"same", key="two"),
    ]
    with pytest.raises(ManifestConflictError):
        builder.build(outputs)


def test_short_hash_length_is_rejected():
    with pytest.raises(ValueError):
        ManifestBuilder(hash_length=6)
    with pytest.raises(ValueError):
        ManifestBuilder(hash_length=0)


def test_collect_outputs_skips_entry_document(tmp_path):
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "main.js").write_bytes(b"x")
    (tmp_path / "index.html").write_text("<html></html>")

    assert [output.name for output in collect_outputs(tmp_path)] == ["assets/main.js"]
