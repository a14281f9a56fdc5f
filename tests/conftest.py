import pytest
import httpx
from typer.testing import CliRunner
from typing import Callable, List

from marsmcp.infrastructure.config import settings
from marsmcp.infrastructure.mars.client import MarsClient
from marsmcp.infrastructure.mars.config import MarsConfig
from marsmcp.infrastructure.resilience.api_retry import ApiRetryService

BASE_URL = "https://example.com/api/"


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def mars_config() -> MarsConfig:
    return MarsConfig(
        base_url=BASE_URL,
        api_key="token",
        timeout_s=1.0,
        max_retries=2,
        retry_base_delay_s=0.001,
        retry_max_delay_s=0.01,
        concurrency=1,
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def make_client(mars_config, recording_sleep, events):
    """Factory building a MarsClient whose upstream is an httpx.MockTransport."""
    def factory(handler: Callable, config: MarsConfig = None, **kwargs) -> MarsClient:
        kwargs.setdefault("retry_service", ApiRetryService(sleep=recording_sleep))
        client = MarsClient(
            config or mars_config,
            transport=httpx.MockTransport(handler),
            event_sink=events.append,
            **kwargs,
        )
        return client

    return factory


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keeps tests away from the developer's environment and config files."""
    for name in (
        "MARS_BASE_URL", "MARS_API_KEY", "MARS_TIMEOUT_MS", "MARS_MAX_RETRIES",
        "MARS_RETRY_BASE_DELAY_MS", "MARS_RETRY_MAX_DELAY_MS", "MARS_CONCURRENCY",
        "MARS_AUTH_SCHEME", "LOG_LEVEL", "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "missing.yaml")
    settings.clear_test_config()
    yield
    settings.clear_test_config()
