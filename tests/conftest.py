"""Pytest configuration and shared fixtures."""

import pytest

from v6watch.config import Config, SmtpConfig

FILLED_CONFIG = """\
# 上次检测到的IPv6地址（程序自动维护，请勿手动修改）
ipv6 = "{ipv6}"

# SMTP服务器配置
[smtp]
server = "smtp.example.com"    # SMTP服务器地址
port = 587               # SMTP端口
login = "watcher@example.com"
password = "secret"
from_addr = "watcher@example.com"
to_addr = "operator@example.com"
"""


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging state before each test."""
    from v6watch.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def smtp_config():
    """A filled-in SMTP configuration."""
    return SmtpConfig(
        server="smtp.example.com",
        port=587,
        login="watcher@example.com",
        password="secret",
        from_addr="watcher@example.com",
        to_addr="operator@example.com",
    )


@pytest.fixture
def config(smtp_config):
    """A configured Config with no previous address."""
    return Config(smtp=smtp_config)


@pytest.fixture
def write_config(tmp_path):
    """Write a filled-in config file and return its path."""

    def _write(ipv6: str = "", name: str = "config.toml", encoding: str = "utf-8"):
        path = tmp_path / name
        path.write_bytes(FILLED_CONFIG.format(ipv6=ipv6).encode(encoding))
        return path

    return _write
