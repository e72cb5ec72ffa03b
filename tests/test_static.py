"""Web UI asset serving tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from nginx_viewer.app import create_app
from nginx_viewer.config import Settings
from nginx_viewer.content.assets import StaticAssets, content_type_for
from nginx_viewer.content.paths import SecurityError, resolve_path


def test_root_serves_entry_page(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "nginx config viewer" in response.text


def test_script_served_with_javascript_type(client: TestClient) -> None:
    response = client.get("/app.js")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/javascript")
    assert "EventSource('/events')" in response.text


def test_unknown_path_falls_back_to_entry_page(client: TestClient) -> None:
    index = client.get("/")
    response = client.get("/foo/bar")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.text == index.text


@pytest.mark.parametrize("path", ["/raw/x", "/events/x", "/rawfile"])
def test_endpoint_prefixes_do_not_fall_back(client: TestClient, path: str) -> None:
    response = client.get(path)
    assert response.status_code == 404
    assert not response.headers["content-type"].startswith("text/html")


@pytest.fixture
def asset_root(tmp_path: Path) -> Path:
    root = tmp_path / "web"
    (root / "assets").mkdir(parents=True)
    (root / "index.html").write_text("<html>entry</html>")
    (root / "assets" / "style.css").write_text("body {}")
    (root / "manifest.json").write_text("{}")
    (root / "logo.svg").write_text("<svg/>")
    return root


class TestStaticAssets:
    """Asset lookup and fallback rules."""

    def test_known_asset(self, asset_root: Path) -> None:
        asset = StaticAssets(asset_root).get("/assets/style.css")
        assert asset is not None
        assert asset.content == b"body {}"
        assert asset.media_type == "text/css"
        assert not asset.fallback

    def test_json_type(self, asset_root: Path) -> None:
        asset = StaticAssets(asset_root).get("/manifest.json")
        assert asset is not None
        assert asset.media_type == "application/json"

    def test_unlisted_extension_has_no_type(self, asset_root: Path) -> None:
        asset = StaticAssets(asset_root).get("/logo.svg")
        assert asset is not None
        assert asset.media_type is None

    def test_directory_falls_back(self, asset_root: Path) -> None:
        asset = StaticAssets(asset_root).get("/assets")
        assert asset is not None
        assert asset.fallback
        assert asset.content == b"<html>entry</html>"

    def test_traversal_falls_back(self, asset_root: Path, tmp_path: Path) -> None:
        (tmp_path / "secret.txt").write_text("secret")
        asset = StaticAssets(asset_root).get("/../secret.txt")
        assert asset is not None
        assert asset.fallback
        assert asset.media_type == "text/html"

    def test_missing_entry_page(self, tmp_path: Path) -> None:
        assert StaticAssets(tmp_path).get("/anything") is None

    def test_content_type_lookup_is_case_insensitive(self) -> None:
        assert content_type_for("APP.JS") == "application/javascript"
        assert content_type_for("README") is None


class TestResolvePath:
    """Path security checks."""

    def test_resolves_inside_root(self, asset_root: Path) -> None:
        path = resolve_path(asset_root, "assets/style.css")
        assert path == (asset_root / "assets" / "style.css").resolve()

    def test_rejects_traversal(self, asset_root: Path) -> None:
        with pytest.raises(SecurityError):
            resolve_path(asset_root, "../secret.txt")

    def test_rejects_null_byte(self, asset_root: Path) -> None:
        with pytest.raises(SecurityError):
            resolve_path(asset_root, "index.html\0")

    def test_rejects_symlink_escape(self, asset_root: Path, tmp_path: Path) -> None:
        (tmp_path / "outside.txt").write_text("x")
        (asset_root / "link.txt").symlink_to(tmp_path / "outside.txt")
        with pytest.raises(SecurityError):
            resolve_path(asset_root, "link.txt")


@pytest.fixture
def empty_ui_client(settings: Settings, tmp_path: Path) -> Iterator[TestClient]:
    empty = tmp_path / "empty-ui"
    empty.mkdir()
    app = create_app(settings.model_copy(update={"static_dir": empty}))
    with TestClient(app) as test_client:
        yield test_client


def test_missing_entry_page_returns_404(empty_ui_client: TestClient) -> None:
    response = empty_ui_client.get("/foo/bar")
    assert response.status_code == 404
