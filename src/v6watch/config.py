"""Configuration management for v6watch.

The configuration lives in a TOML file next to where the tool is run. It
holds the SMTP relay settings and the last IPv6 address the operator was
told about. The file is read and rewritten with tomlkit so that the
operator's comments and layout survive the automatic ``ipv6`` updates.
"""

import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from v6watch.errors import (
    ConfigIncompleteError,
    ConfigMissingError,
    PersistenceFailedError,
)

__all__ = [
    "Config",
    "ConfigStore",
    "DEFAULT_CONFIG",
    "SmtpConfig",
    "get_config_path",
]

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config.toml"

# Top-level keys must precede the first table, otherwise TOML assigns them
# to that table.
DEFAULT_CONFIG = """\
# 上次检测到的IPv6地址（程序自动维护，请勿手动修改）
ipv6 = ""

# SMTP服务器配置
[smtp]
server = "smtp.qq.com"    # SMTP服务器地址
port = 587               # SMTP端口
login = ""              # 邮箱账号
password = ""           # 邮箱授权码
from_addr = ""         # 发件人地址
to_addr = ""          # 收件人地址
"""

INCOMPLETE_MESSAGE = "配置文件未填写完整"

_SMTP_STRING_FIELDS = ("server", "login", "password", "from_addr", "to_addr")


@dataclass(frozen=True)
class SmtpConfig:
    """SMTP relay settings."""

    server: str = "smtp.qq.com"
    port: int = 587
    login: str = ""
    password: str = ""
    from_addr: str = ""
    to_addr: str = ""


@dataclass(frozen=True)
class Config:
    """Notification configuration.

    Attributes:
        smtp: Relay, credentials and addresses used for the notification.
        ipv6: Last address the operator was notified about, None on first run.
    """

    smtp: SmtpConfig
    ipv6: str | None = None

    @property
    def is_configured(self) -> bool:
        """Whether login and password have been filled in."""
        return bool(self.smtp.login) and bool(self.smtp.password)

    def with_ipv6(self, address: str | None) -> "Config":
        """Return a copy recording ``address`` as the last observed one."""
        return replace(self, ipv6=address)


def get_config_path(custom_path: Path | None = None) -> Path:
    """Get the configuration file path.

    Args:
        custom_path: Override path. If None, returns default.

    Returns:
        Path to config file (``config.toml`` in the working directory).
    """
    if custom_path is not None:
        return Path(custom_path)
    return Path(DEFAULT_CONFIG_NAME)


def _parse_config(data: dict[str, Any]) -> Config:
    """Build a Config from unwrapped TOML data.

    Raises:
        ConfigIncompleteError: If a section or key is missing or mistyped.
    """
    smtp_data = data.get("smtp")
    if not isinstance(smtp_data, dict):
        raise ConfigIncompleteError("配置文件缺少 [smtp] 配置段")

    values: dict[str, Any] = {}
    for name in _SMTP_STRING_FIELDS:
        value = smtp_data.get(name)
        if not isinstance(value, str):
            raise ConfigIncompleteError(f"配置项 smtp.{name} 缺失或不是字符串")
        values[name] = value

    port = smtp_data.get("port")
    # bool is an int subclass
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ConfigIncompleteError("配置项 smtp.port 必须是 1-65535 之间的整数")
    values["port"] = port

    ipv6 = data.get("ipv6", "")
    if not isinstance(ipv6, str):
        raise ConfigIncompleteError("配置项 ipv6 必须是字符串")

    # An empty string is how the template spells "never observed"
    return Config(smtp=SmtpConfig(**values), ipv6=ipv6.strip() or None)


class ConfigStore:
    """Loads and persists the configuration file.

    Writes are atomic (temp file + rename) and owner-only (0600), since the
    file carries the SMTP password in clear text.
    """

    def __init__(self, path: Path | str | None = None):
        """Initialize store.

        Args:
            path: Path to the TOML file. Defaults to ./config.toml.
        """
        self._path = get_config_path(Path(path) if path is not None else None)

    @property
    def path(self) -> Path:
        """Location of the configuration file."""
        return self._path

    def load(self) -> Config:
        """Load and validate the configuration.

        Returns:
            A fully configured Config.

        Raises:
            ConfigMissingError: If the file did not exist. A template is
                written before raising.
            ConfigIncompleteError: If the file is unreadable, malformed, or
                the credentials are empty. The file is left untouched.
            PersistenceFailedError: If the template could not be written.
        """
        if not self._path.exists():
            self.write_template()
            logger.info(f"Created configuration template at {self._path}")
            raise ConfigMissingError(self._path, INCOMPLETE_MESSAGE)

        try:
            content = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigIncompleteError(f"无法读取配置文件 {self._path}: {e}") from e

        try:
            data = tomlkit.parse(content).unwrap()
        except TOMLKitError as e:
            raise ConfigIncompleteError(f"配置文件格式错误: {e}") from e

        config = _parse_config(data)
        if not config.is_configured:
            logger.debug("SMTP login or password is empty")
            raise ConfigIncompleteError(INCOMPLETE_MESSAGE)

        logger.debug(f"Loaded configuration from {self._path}")
        return config

    def save(self, config: Config) -> None:
        """Persist ``config``, keeping the file's comments and layout.

        Raises:
            PersistenceFailedError: If the file cannot be read back or written.
        """
        try:
            content = self._path.read_text(encoding="utf-8") if self._path.exists() else ""
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceFailedError(f"无法读取配置文件 {self._path}: {e}") from e

        try:
            doc = tomlkit.parse(content or DEFAULT_CONFIG)
        except TOMLKitError:
            logger.warning("Existing configuration is not valid TOML, rewriting from template")
            doc = tomlkit.parse(DEFAULT_CONFIG)

        ipv6 = config.ipv6 or ""
        if doc.get("ipv6") != ipv6:
            doc["ipv6"] = ipv6

        smtp = doc.get("smtp")
        if smtp is None:
            smtp = tomlkit.table()
            doc["smtp"] = smtp
        for name, value in asdict(config.smtp).items():
            if smtp.get(name) != value:
                smtp[name] = value

        self._write(tomlkit.dumps(doc))
        logger.debug(f"Saved configuration to {self._path}")

    def write_template(self) -> None:
        """Write the commented default configuration.

        Raises:
            PersistenceFailedError: If the file cannot be written.
        """
        self._write(DEFAULT_CONFIG)

    def _write(self, content: str) -> None:
        """Write atomically via temp file and rename."""
        temp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            temp_path.replace(self._path)
        except OSError as e:
            raise PersistenceFailedError(f"无法写入配置文件 {self._path}: {e}") from e
