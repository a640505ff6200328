"""
配置加载测试
"""
import pytest

from cert_renewal_dispatcher.settings import Settings, parse_properties, load_settings
from cert_renewal_dispatcher.services.error_handler import ConfigurationError


CONFIG_TEXT = """# 证书签发配置
username=certadmin
dns_zone=example.com
domain="www.example.com"
email='admin@example.com'
cloudflare_api_token=abc=def
; 分号注释
renewal_threshold_days = 21
"""


class TestParseProperties:
    """属性文件解析测试类"""

    def test_parse_values(self):
        """测试解析键值、引号与注释"""
        values = parse_properties(CONFIG_TEXT)

        assert values == {
            'username': 'certadmin',
            'dns_zone': 'example.com',
            'domain': 'www.example.com',
            'email': 'admin@example.com',
            'cloudflare_api_token': 'abc=def',
            'renewal_threshold_days': '21',
        }

    def test_parse_empty(self):
        """测试空文件"""
        assert parse_properties("") == {}

    def test_parse_inline_comment(self):
        """测试行尾注释与行首缩进"""
        values = parse_properties(
            'email="admin@example.com"  # 管理员邮箱\n'
            '    dns_zone=example.com\n'
            'cloudflare_api_token=abc#def\n'
        )

        assert values == {
            'email': 'admin@example.com',
            'dns_zone': 'example.com',
            'cloudflare_api_token': 'abc#def',
        }

    def test_parse_invalid_line(self):
        """测试无法解析的行"""
        with pytest.raises(ConfigurationError):
            parse_properties("just some words\n")


class TestSettings:
    """配置对象测试类"""

    def test_defaults(self):
        """测试默认值"""
        settings = Settings()

        assert settings.live_dir == "/etc/letsencrypt/live"
        assert settings.renewal_threshold_days == 14
        assert settings.ansible_playbook_dir == "~/ansible_home/playbooks"
        assert settings.inventory_file == "~/ansible_home/inventory/default_inventory"
        assert settings.credentials_dir == "~/.secrets/certbot"

    def test_derived_paths(self):
        """测试派生路径"""
        settings = Settings(ansible_home="/opt/ansible/", username="certadmin")

        assert settings.ansible_playbook_dir == "/opt/ansible/playbooks"
        assert settings.inventory_file == "/opt/ansible/inventory/default_inventory"
        assert settings.credentials_dir == "/home/certadmin/.secrets/certbot"

    def test_explicit_paths_kept(self):
        """测试显式指定的路径不被覆盖"""
        settings = Settings(inventory_file="/etc/ansible/hosts", credentials_dir="/root/creds")

        assert settings.inventory_file == "/etc/ansible/hosts"
        assert settings.credentials_dir == "/root/creds"


class TestLoadSettings:
    """配置加载测试类"""

    def test_load_from_file(self, tmp_path):
        """测试从文件加载"""
        path = tmp_path / "certbot.conf"
        path.write_text(CONFIG_TEXT)

        settings = load_settings(str(path), environ={})

        assert settings.username == "certadmin"
        assert settings.domain == "www.example.com"
        assert settings.cloudflare_api_token == "abc=def"
        assert settings.renewal_threshold_days == 21
        assert settings.credentials_dir == "/home/certadmin/.secrets/certbot"

    def test_precedence(self, tmp_path):
        """测试 文件 < 环境变量 < 命令行 的优先级"""
        path = tmp_path / "certbot.conf"
        path.write_text("renewal_threshold_days=21\nlive_dir=/from/file\nemail=file@example.com\n")

        settings = load_settings(
            str(path),
            overrides={'renewal_threshold_days': 7, 'live_dir': None},
            environ={'RENEWAL_THRESHOLD_DAYS': '10', 'LIVE_DIR': '/from/env'}
        )

        assert settings.renewal_threshold_days == 7
        assert settings.live_dir == "/from/env"
        assert settings.email == "file@example.com"

    def test_unknown_file_key_ignored(self, tmp_path):
        """测试配置文件中的未知项被忽略"""
        path = tmp_path / "certbot.conf"
        path.write_text("favourite_colour=blue\n")

        settings = load_settings(str(path), environ={})

        assert not hasattr(settings, 'favourite_colour')

    def test_unknown_override_rejected(self):
        """测试未知的覆盖项"""
        with pytest.raises(ConfigurationError):
            load_settings(overrides={'favourite_colour': 'blue'}, environ={})

    def test_invalid_threshold(self):
        """测试阈值不是整数"""
        with pytest.raises(ConfigurationError):
            load_settings(environ={'RENEWAL_THRESHOLD_DAYS': 'two weeks'})

    def test_missing_file(self, tmp_path):
        """测试配置文件不存在"""
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(str(tmp_path / "missing.conf"), environ={})

        assert "配置文件不存在" in str(exc_info.value)

    def test_no_file(self):
        """测试不指定配置文件时使用默认值"""
        settings = load_settings(environ={})

        assert settings == Settings()

    def test_letsencrypt_live_dir_env(self):
        """测试 LETSENCRYPT_LIVE_DIR 环境变量设置证书存储目录"""
        settings = load_settings(environ={'LETSENCRYPT_LIVE_DIR': '/srv/le/live'})

        assert settings.live_dir == "/srv/le/live"

    def test_letsencrypt_live_dir_env_preferred(self):
        """测试两个环境变量同时存在时 LETSENCRYPT_LIVE_DIR 优先"""
        settings = load_settings(environ={'LIVE_DIR': '/a', 'LETSENCRYPT_LIVE_DIR': '/b'})

        assert settings.live_dir == "/b"

    def test_letsencrypt_live_dir_cli_override(self):
        """测试命令行参数覆盖 LETSENCRYPT_LIVE_DIR"""
        settings = load_settings(
            overrides={'live_dir': '/from/cli'},
            environ={'LETSENCRYPT_LIVE_DIR': '/srv/le/live'}
        )

        assert settings.live_dir == "/from/cli"
