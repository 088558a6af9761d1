"""End-to-end tests for the marketing site."""

import gzip
import logging
from pathlib import Path

import pytest

from gardensite.config import SiteConfig
from gardensite.http.response import HTML
from gardensite.site import NOT_FOUND_FALLBACK, TEMPLATE_MISSING
from gardensite.testing import TestClient, assert_json_error, assert_security_headers

from conftest import CSS_BYTES, PAGE_BYTES

PAGES = [
    ("/", "index.html"),
    ("/tutorial", "tutorial.html"),
    ("/tutorial/self-hosting", "tutorial-self-hosting.html"),
    ("/tutorial/cli-reference", "tutorial-cli-reference.html"),
]


class TestHealth:
    async def test_health(self, make_site) -> None:
        async with TestClient(make_site(version="1.2.3")) as client:
            response = await client.get("/health")
        assert response.status == 200
        assert response.content_type == "application/json"
        assert response.json_body() == {
            "status": "healthy",
            "version": "1.2.3",
            "app": "Knowledge Garden CLI - Web Dashboard",
        }
        assert_security_headers(response, "1.2.3")

    async def test_query_string_ignored(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.get("/health?verbose=1")
        assert response.json_body()["status"] == "healthy"

    async def test_head(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.head("/health")
        assert response.status == 200
        assert response.body_bytes == b""


class TestPages:
    @pytest.mark.parametrize(("path", "document"), PAGES)
    async def test_serves_document_verbatim(self, make_site, path: str, document: str) -> None:
        async with TestClient(make_site()) as client:
            response = await client.get(path)
        assert response.status == 200
        assert response.content_type == HTML
        assert response.body_bytes == PAGE_BYTES[document]
        assert_security_headers(response)

    async def test_edits_visible_without_restart(self, make_site, site_dir: Path) -> None:
        async with TestClient(make_site()) as client:
            await client.get("/tutorial")
            (site_dir / "templates" / "tutorial.html").write_bytes(b"<h1>Updated</h1>")
            response = await client.get("/tutorial")
        assert response.body_bytes == b"<h1>Updated</h1>"

    async def test_missing_document_is_404_others_unaffected(
        self, make_site, site_dir: Path
    ) -> None:
        (site_dir / "templates" / "tutorial-self-hosting.html").unlink()
        async with TestClient(make_site()) as client:
            missing = await client.get("/tutorial/self-hosting")
            others = [await client.get(path) for path, _ in PAGES if path != "/tutorial/self-hosting"]
        assert missing.status == 404
        assert missing.text == TEMPLATE_MISSING
        assert [r.status for r in others] == [200, 200, 200]

    async def test_static_asset(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.get("/static/css/site.css")
        assert response.status == 200
        assert response.body_bytes == CSS_BYTES
        assert_security_headers(response)


class TestNotFound:
    async def test_custom_page(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.get("/does-not-exist")
        assert response.status == 404
        assert response.content_type == HTML
        assert response.body_bytes == PAGE_BYTES["404.html"]
        assert_security_headers(response)

    async def test_fallback_text(self, make_site, site_dir: Path) -> None:
        (site_dir / "templates" / "404.html").unlink()
        async with TestClient(make_site()) as client:
            response = await client.get("/nope")
        assert response.status == 404
        assert response.text == NOT_FOUND_FALLBACK

    async def test_wrong_method_gets_not_found_page(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.post("/tutorial")
        assert response.status == 404
        assert response.body_bytes == PAGE_BYTES["404.html"]

    async def test_missing_static_asset(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.get("/static/nope.js")
        assert response.status == 404
        assert response.body_bytes == PAGE_BYTES["404.html"]


class TestErrors:
    async def test_unexpected_exception_is_json_500(self, make_site) -> None:
        app = make_site(env="production")

        @app.route("/boom")
        def boom():
            raise RuntimeError("secret detail")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert_json_error(response, 500, "Internal Server Error")
        assert_security_headers(response)

    async def test_development_shows_message(self, make_site) -> None:
        app = make_site()

        @app.route("/boom")
        def boom():
            raise RuntimeError("secret detail")

        async with TestClient(app) as client:
            response = await client.get("/boom")
        assert_json_error(response, 500, "secret detail")

    async def test_traversal_is_json_403(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.get("/static/../templates/index.html")
        assert_json_error(response, 403, "Forbidden")


class TestMiddlewareChain:
    async def test_rate_limited_response_has_security_headers(self, make_site) -> None:
        app = make_site(rate_limit_requests=1)
        async with TestClient(app) as client:
            await client.get("/")
            response = await client.get("/")
        assert_json_error(response, 429, "Rate limit exceeded")
        assert_security_headers(response)

    async def test_compressed_page(self, make_site, site_dir: Path) -> None:
        body = b"<html>" + b"<p>garden</p>" * 100 + b"</html>"
        (site_dir / "templates" / "index.html").write_bytes(body)
        async with TestClient(make_site()) as client:
            response = await client.get("/", headers={"Accept-Encoding": "gzip"})
        assert response.header("content-encoding") == "gzip"
        assert gzip.decompress(response.body_bytes) == body
        assert_security_headers(response)

    async def test_cors_on_pages(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.get("/", headers={"Origin": "https://example.com"})
        assert response.header("access-control-allow-origin") == "*"

    async def test_not_found_page_passes_through_whole_chain(
        self, make_site, site_dir: Path
    ) -> None:
        body = b"<html>" + b"<p>nothing planted here</p>" * 80 + b"</html>"
        (site_dir / "templates" / "404.html").write_bytes(body)
        async with TestClient(make_site()) as client:
            response = await client.get(
                "/nope",
                headers={"Origin": "https://example.com", "Accept-Encoding": "gzip"},
            )
        assert response.status == 404
        assert response.header("access-control-allow-origin") == "*"
        assert response.header("content-encoding") == "gzip"
        assert gzip.decompress(response.body_bytes) == body
        assert response.header("x-ratelimit-limit") == "120"
        assert_security_headers(response)

    async def test_wrong_method_page_passes_through_whole_chain(self, make_site) -> None:
        async with TestClient(make_site()) as client:
            response = await client.post("/health", headers={"Origin": "https://example.com"})
        assert response.status == 404
        assert response.header("access-control-allow-origin") == "*"
        assert response.header("x-ratelimit-remaining") == "119"

    async def test_access_log(self, make_site, caplog: pytest.LogCaptureFixture) -> None:
        async with TestClient(make_site()) as client:
            with caplog.at_level(logging.INFO, logger="gardensite.access"):
                await client.get("/tutorial")
        (line,) = [r.getMessage() for r in caplog.records if r.name == "gardensite.access"]
        status, _latency, ip, method, path = line.split(" | ")
        assert (status, ip, method, path) == ("200", "127.0.0.1", "GET", "/tutorial")

    async def test_access_log_sees_final_status(
        self, make_site, caplog: pytest.LogCaptureFixture
    ) -> None:
        async with TestClient(make_site()) as client:
            with caplog.at_level(logging.INFO, logger="gardensite.access"):
                await client.get("/missing")
        messages = [r.getMessage() for r in caplog.records if r.name == "gardensite.access"]
        assert messages[0].startswith("404 | ")


class TestConfigWiring:
    def test_default_workdir_is_cwd(
        self, site_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from gardensite.middleware import StaticFiles
        from gardensite.site import create_app

        monkeypatch.chdir(site_dir)
        app = create_app(SiteConfig())
        static = next(mw for mw in app._middleware_list if isinstance(mw, StaticFiles))
        assert static.directory == (site_dir / "static").resolve()
