"""
配置加载
"""
import os
import configparser
import logging
from dataclasses import dataclass, fields, asdict
from typing import Any, Dict, Mapping, Optional

from .services.error_handler import ConfigurationError

PLACEHOLDER_API_TOKEN = "YOUR_CLOUDFLARE_API_TOKEN_HERE"

# 除大写字段名之外额外接受的环境变量（后者优先）
ENV_ALIASES = {
    'live_dir': ('LETSENCRYPT_LIVE_DIR',),
}

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """运行配置"""
    live_dir: str = "/etc/letsencrypt/live"
    cert_filename: str = "cert.pem"
    renewal_threshold_days: int = 14

    ansible_home: str = "~/ansible_home"
    ansible_playbook_dir: Optional[str] = None
    ansible_playbook: str = "deploy_webmin_cert.yml"
    inventory_file: Optional[str] = None

    sudo_command: str = "sudo"
    certbot_command: str = "certbot"
    ansible_playbook_command: str = "ansible-playbook"

    timer_name: str = "snap.certbot.renew.timer"
    timer_service_name: str = "snap.certbot.renew.service"

    username: str = ""
    dns_zone: str = ""
    domain: str = ""
    email: str = ""
    cloudflare_api_token: str = ""
    credentials_dir: Optional[str] = None

    sns_topic_arn: str = ""
    notify_on: str = "failures"
    log_level: str = "INFO"

    def __post_init__(self):
        home = self.ansible_home.rstrip("/")
        if not self.ansible_playbook_dir:
            self.ansible_playbook_dir = f"{home}/playbooks"
        if not self.inventory_file:
            self.inventory_file = f"{home}/inventory/default_inventory"
        if not self.credentials_dir:
            if self.username:
                self.credentials_dir = f"/home/{self.username}/.secrets/certbot"
            else:
                self.credentials_dir = "~/.secrets/certbot"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _strip_quotes(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_properties(text: str) -> Dict[str, str]:
    """
    解析 key=value 格式的属性文件（支持#注释、行尾 " #" 注释和引号）

    Args:
        text: 文件内容

    Returns:
        Dict[str, str]: 键值对
    """
    parser = configparser.ConfigParser(
        delimiters=("=",),
        comment_prefixes=("#", ";"),
        inline_comment_prefixes=("#",),
        interpolation=None,
        strict=False
    )
    try:
        # 行首缩进不作为续行处理
        lines = (line.strip() for line in text.splitlines())
        parser.read_string("[settings]\n" + "\n".join(lines))
    except configparser.Error as e:
        raise ConfigurationError(f"配置文件格式错误: {str(e)}") from e

    return {key: _strip_quotes(value) for key, value in parser.items("settings")}


def load_settings(path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None,
                  environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    按 配置文件 < 环境变量 < 命令行参数 的优先级加载配置

    Args:
        path: 属性文件路径
        overrides: 命令行覆盖值（值为None的项被忽略）
        environ: 环境变量，默认为 os.environ

    Returns:
        Settings: 配置对象

    Raises:
        ConfigurationError: 配置文件不存在、不可读或值类型无效
    """
    environ = os.environ if environ is None else environ
    known = {f.name: f for f in fields(Settings)}
    values: Dict[str, Any] = {}

    if path:
        try:
            with open(path, encoding="utf-8") as f:
                file_values = parse_properties(f.read())
        except FileNotFoundError as e:
            raise ConfigurationError(f"配置文件不存在: {path}") from e
        except OSError as e:
            raise ConfigurationError(f"无法读取配置文件 {path}: {str(e)}") from e

        for key, value in file_values.items():
            if key in known:
                values[key] = value
            else:
                logger.warning(f"未知的配置项: {key}")

    for name in known:
        for env_name in (name.upper(),) + ENV_ALIASES.get(name, ()):
            env_value = environ.get(env_name)
            if env_value:
                values[name] = env_value

    for name, value in (overrides or {}).items():
        if value is not None:
            if name not in known:
                raise ConfigurationError(f"未知的配置项: {name}")
            values[name] = value

    if "renewal_threshold_days" in values:
        raw = values["renewal_threshold_days"]
        try:
            values["renewal_threshold_days"] = int(str(raw).strip())
        except ValueError as e:
            raise ConfigurationError(f"renewal_threshold_days 必须是整数: {raw!r}") from e

    return Settings(**values)
