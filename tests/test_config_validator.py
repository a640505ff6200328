"""
配置验证器测试
"""
import pytest

from cert_renewal_dispatcher.settings import Settings, PLACEHOLDER_API_TOKEN
from cert_renewal_dispatcher.services.config_validator import ConfigValidator


class TestConfigValidator:
    """配置验证器测试类"""

    def setup_method(self):
        """测试前准备"""
        self.issue_settings = Settings(
            username="certadmin",
            dns_zone="example.com",
            domain="www.example.com",
            email="admin@example.com",
            cloudflare_api_token="cf-token-1234567890"
        )

    def test_renewal_defaults_valid(self):
        """测试默认续期配置有效"""
        result = ConfigValidator(Settings()).validate_for_renewal()

        assert result['is_valid'] is True
        assert result['errors'] == []
        assert any("SNS_TOPIC_ARN" in w for w in result['warnings'])

    @pytest.mark.parametrize("threshold", [0, -5, True, "14"])
    def test_renewal_invalid_threshold(self, threshold):
        """测试无效的续期阈值"""
        result = ConfigValidator(Settings(renewal_threshold_days=threshold)).validate_for_renewal()

        assert result['is_valid'] is False
        assert any("续期阈值" in e for e in result['errors'])

    def test_renewal_missing_playbook(self):
        """测试缺少playbook"""
        result = ConfigValidator(Settings(ansible_playbook="")).validate_for_renewal()

        assert result['is_valid'] is False
        assert "ansible_playbook 未设置" in result['errors']

    def test_renewal_includes_notification_errors(self):
        """测试续期验证包含通知配置错误"""
        result = ConfigValidator(Settings(notify_on="sometimes")).validate_for_renewal()

        assert result['is_valid'] is False
        assert any("notify_on" in e for e in result['errors'])

    def test_issue_valid(self):
        """测试有效的签发配置"""
        result = ConfigValidator(self.issue_settings).validate_for_issue()

        assert result['is_valid'] is True
        assert result['errors'] == []
        assert result['warnings'] == []

    def test_issue_missing_required(self):
        """测试缺少签发必需配置"""
        result = ConfigValidator(Settings()).validate_for_issue()

        assert result['is_valid'] is False
        assert len(result['errors']) == 3
        assert any("dns_zone" in e for e in result['errors'])
        assert any("email" in e for e in result['errors'])
        assert any("cloudflare_api_token" in e for e in result['errors'])

    def test_issue_placeholder_token(self):
        """测试模板占位符令牌被拒绝"""
        self.issue_settings.cloudflare_api_token = PLACEHOLDER_API_TOKEN

        result = ConfigValidator(self.issue_settings).validate_for_issue()

        assert result['is_valid'] is False
        assert any("占位符" in e for e in result['errors'])

    def test_issue_invalid_email(self):
        """测试邮箱格式无效"""
        self.issue_settings.email = "not-an-email"

        result = ConfigValidator(self.issue_settings).validate_for_issue()

        assert result['is_valid'] is False
        assert "邮箱格式无效: not-an-email" in result['errors']

    def test_issue_without_username_warns(self):
        """测试未设置用户名时给出警告"""
        settings = Settings(
            dns_zone="example.com",
            email="admin@example.com",
            cloudflare_api_token="cf-token-1234567890"
        )

        result = ConfigValidator(settings).validate_for_issue()

        assert result['is_valid'] is True
        assert "~/.secrets/certbot" in result['warnings'][0]

    def test_notification_valid_arn(self):
        """测试有效的SNS ARN"""
        settings = Settings(sns_topic_arn="arn:aws:sns:eu-west-1:123456789012:cert-alerts")

        result = ConfigValidator(settings).validate_notification()

        assert result['is_valid'] is True
        assert result['warnings'] == []

    def test_notification_invalid_arn(self):
        """测试无效的SNS ARN"""
        settings = Settings(sns_topic_arn="arn:aws:sqs:eu-west-1:123456789012:queue")

        result = ConfigValidator(settings).validate_notification()

        assert result['is_valid'] is False
        assert any("SNS主题ARN格式无效" in e for e in result['errors'])

    def test_configuration_summary(self):
        """测试验证摘要"""
        validator = ConfigValidator(Settings())
        result = validator.validate_for_issue()

        summary = validator.get_configuration_summary(result)

        assert "配置验证摘要" in summary
        assert "❌ 配置验证失败" in summary
        assert "错误:" in summary
        assert "警告:" in summary

    def test_configuration_summary_valid(self):
        """测试验证通过的摘要"""
        validator = ConfigValidator(self.issue_settings)

        summary = validator.get_configuration_summary(validator.validate_for_issue())

        assert "✅ 配置验证通过" in summary
        assert "错误:" not in summary
