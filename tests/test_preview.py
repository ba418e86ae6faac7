"""
Tests for the production preview server and the Cache-Control contract.
"""

import pytest
from fastapi.testclient import TestClient

from site_publisher.api.preview import create_preview_app
from site_publisher.services.cache_headers import (
    ENTRY_CACHE_CONTROL,
    IMMUTABLE_CACHE_CONTROL,
    cache_control_for,
    render_headers_file,
)


@pytest.fixture
def dist(tmp_path):
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "main.0a1b2c3d.js").write_text("console.log('app')")
    (tmp_path / "article" / "hello-world").mkdir(parents=True)
    (tmp_path / "article" / "hello-world" / "index.html").write_text("<p>hello</p>")
    (tmp_path / "index.html").write_text("<div id=\"root\"></div>")
    return tmp_path


@pytest.fixture
def client(dist):
    return TestClient(create_preview_app(dist))


def test_fingerprinted_asset_is_immutable(client):
    response = client.get("/assets/main.0a1b2c3d.js")
    assert response.status_code == 200
    assert response.headers["cache-control"] == IMMUTABLE_CACHE_CONTROL


def test_entry_document_is_revalidated(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["cache-control"] == ENTRY_CACHE_CONTROL


def test_directory_index_is_served(client):
    response = client.get("/article/hello-world")
    assert response.text == "<p>hello</p>"
    assert response.headers["cache-control"] == ENTRY_CACHE_CONTROL


def test_unknown_route_falls_back_to_entry(client):
    response = client.get("/bookmarks")
    assert response.status_code == 200
    assert 'id="root"' in response.text


def test_missing_dist_is_404(tmp_path):
    client = TestClient(create_preview_app(tmp_path / "empty"))
    assert client.get("/").status_code == 404


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/assets/main.0a1b2c3d.js", IMMUTABLE_CACHE_CONTROL),
        ("/content/article/hello.0123abcd.json?v=1", IMMUTABLE_CACHE_CONTROL),
        ("/assets/logo.svg", ENTRY_CACHE_CONTROL),
        ("/content/manifest.json", ENTRY_CACHE_CONTROL),
        ("/index.html", ENTRY_CACHE_CONTROL),
        ("/favicon.0a1b2c3d.ico", ENTRY_CACHE_CONTROL),
    ],
)
def test_cache_control_for(path, expected):
    assert cache_control_for(path) == expected


def test_headers_file_pairs_both_directives():
    rules = render_headers_file()
    assert "/index.html\n  Cache-Control: " + ENTRY_CACHE_CONTROL in rules
    assert "/assets/*\n  Cache-Control: " + IMMUTABLE_CACHE_CONTROL in rules
