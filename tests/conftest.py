"""Shared fixtures: a throwaway site directory with known page bytes."""

from pathlib import Path

import pytest

from gardensite.config import SiteConfig
from gardensite.middleware import RateLimitConfig, RateLimitMiddleware
from gardensite.site import create_app

PAGE_BYTES = {
    "index.html": b"<html><body><h1>Knowledge Garden</h1></body></html>",
    "tutorial.html": b"<html><body><h1>Tutorial</h1></body></html>",
    "tutorial-self-hosting.html": b"<html><body><h1>Self-hosting</h1></body></html>",
    "tutorial-cli-reference.html": b"<html><body><h1>CLI reference</h1></body></html>",
    "404.html": b"<html><body><h1>Lost in the garden</h1></body></html>",
}

CSS_BYTES = b"body { color: #15803d; }\n"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    templates = tmp_path / "templates"
    templates.mkdir()
    for name, body in PAGE_BYTES.items():
        (templates / name).write_bytes(body)
    css = tmp_path / "static" / "css"
    css.mkdir(parents=True)
    (css / "site.css").write_bytes(CSS_BYTES)
    return tmp_path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_site(site_dir: Path, clock: FakeClock):
    """Factory building the full site over ``site_dir`` with a fake-clock limiter."""

    def factory(config: SiteConfig | None = None, **overrides):
        config = config or SiteConfig(**overrides)
        limiter = RateLimitMiddleware(
            RateLimitConfig(
                requests=config.rate_limit_requests,
                window_seconds=config.rate_limit_window,
            ),
            clock=clock,
        )
        return create_app(config, site_dir, rate_limiter=limiter)

    return factory
