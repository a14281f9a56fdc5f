import pytest

from marsmcp.domain.models.common import RetryPolicy
from marsmcp.infrastructure.mars.config import MarsConfig


def test_retry_policy_from_config():
    config = MarsConfig(max_retries=3, retry_base_delay_s=0.5, retry_max_delay_s=4.0)
    assert config.retry_policy == RetryPolicy(max_retries=3, base_delay_s=0.5, max_delay_s=4.0)


@pytest.mark.parametrize("kwargs", [
    {"base_url": "example.com"},
    {"timeout_s": 0},
    {"concurrency": 0},
    {"auth_scheme": "digest"},
    {"max_retries": -1},
    {"retry_base_delay_s": -1.0},
])
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ValueError):
        MarsConfig(**kwargs)


def test_config_is_immutable():
    config = MarsConfig()
    with pytest.raises(AttributeError):
        config.concurrency = 10


def test_repr_hides_api_key():
    config = MarsConfig(api_key="very-secret")
    assert "very-secret" not in repr(config)
    assert "***" in repr(config)
