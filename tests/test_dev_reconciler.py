"""
Tests for dev-time page reconciliation.
"""

import pytest

from site_publisher.services import DevAssetInjector, DevReconciler, PageMaterializer
from site_publisher.services.dev_reconciler import parse_route, splice_data_script
from site_publisher.services.materializer import DATA_SCRIPT_PATTERN, DEV_SCRIPTS

SHELL = """<!doctype html>
<html lang="en">
  <head>
    <title>Dev shell</title>
  </head>
  <body>
    <div id="root"></div>
  </body>
</html>
"""


class RecordingInjector:
    def __init__(self) -> None:
        self.urls: list[str] = []

    async def transform(self, url: str, html: str) -> str:
        self.urls.append(url)
        return html.replace("</head>", "<!-- injected --></head>")


@pytest.fixture
def shell_path(tmp_path):
    path = tmp_path / "index.html"
    path.write_text(SHELL)
    return path


@pytest.fixture
def build_dir(tmp_path):
    return tmp_path / ".build"


@pytest.mark.asyncio
async def test_missing_document_serves_placeholder(build_dir, shell_path):
    reconciler = DevReconciler(build_dir=build_dir, shell_path=shell_path)

    page = await reconciler.reconcile("/article/not-built-yet")

    assert page is not None
    assert page.status_code == 200
    assert page.placeholder
    assert "This page is being rebuilt" in page.html


@pytest.mark.asyncio
async def test_materialized_document_is_spliced_into_shell(build_dir, shell_path, article):
    PageMaterializer(build_dir=build_dir).materialize(article)
    injector = RecordingInjector()
    reconciler = DevReconciler(build_dir=build_dir, shell_path=shell_path, injector=injector)

    page = await reconciler.reconcile("/article/hello-world")

    assert not page.placeholder
    assert "<title>Dev shell</title>" in page.html
    assert len(DATA_SCRIPT_PATTERN.findall(page.html)) == 1
    assert "<!-- injected -->" in page.html
    assert injector.urls == ["/article/hello-world"]


@pytest.mark.asyncio
async def test_nested_context_route(build_dir, shell_path, context_doc):
    PageMaterializer(build_dir=build_dir).materialize(context_doc)
    reconciler = DevReconciler(build_dir=build_dir, shell_path=shell_path)

    page = await reconciler.reconcile("/context/principles/integrity/")

    assert not page.placeholder
    assert 'id="context-data"' in page.html
    assert DEV_SCRIPTS in page.html


@pytest.mark.asyncio
async def test_document_without_data_script_serves_placeholder(build_dir, shell_path):
    target = build_dir / "article" / "broken" / "index.html"
    target.parent.mkdir(parents=True)
    target.write_text("<html><body>half written")

    page = await DevReconciler(build_dir=build_dir, shell_path=shell_path).reconcile(
        "/article/broken"
    )

    assert page.placeholder


@pytest.mark.asyncio
async def test_non_content_route_is_ignored(build_dir):
    assert await DevReconciler(build_dir=build_dir).reconcile("/about") is None


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/article/hello", ("article", "hello")),
        ("/article/hello/", ("article", "hello")),
        ("/context/a/b?x=1", ("context", "a/b")),
        ("/article/../secrets", None),
        ("/context/a/.git", None),
        ("/bookmarks", None),
    ],
)
def test_parse_route(path, expected):
    assert parse_route(path) == expected


def test_splice_replaces_existing_data_script():
    shell = SHELL.replace(
        "</body>", '<script id="article-data" type="application/json">{}</script></body>'
    )
    spliced = splice_data_script(
        shell, '<script id="article-data" type="application/json">{"a":1}</script>'
    )
    assert DATA_SCRIPT_PATTERN.findall(spliced) == [
        '<script id="article-data" type="application/json">{"a":1}</script>'
    ]


@pytest.mark.asyncio
async def test_dev_injector_adds_scripts_once():
    injector = DevAssetInjector()
    html = await injector.transform("/", SHELL)
    assert html.count("/@vite/client") == 1
    assert await injector.transform("/", html) == html
