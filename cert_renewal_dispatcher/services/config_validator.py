"""
配置验证服务
"""
import re
import logging
from typing import Dict, Any

from ..settings import Settings, PLACEHOLDER_API_TOKEN


class ConfigValidator:
    """配置验证器"""

    NOTIFY_MODES = ("failures", "always")

    def __init__(self, settings: Settings):
        """
        初始化配置验证器

        Args:
            settings: 待验证的配置
        """
        self.settings = settings
        self.logger = logging.getLogger(__name__)

        # 签发证书时必需的配置项
        self.required_issue_keys = {
            'dns_zone': 'DNS区域',
            'email': '注册邮箱',
            'cloudflare_api_token': 'Cloudflare API令牌'
        }

    def _new_result(self) -> Dict[str, Any]:
        return {
            'is_valid': True,
            'errors': [],
            'warnings': []
        }

    def validate_for_renewal(self) -> Dict[str, Any]:
        """
        验证续期运行所需配置

        Returns:
            Dict[str, Any]: 验证结果
        """
        result = self._new_result()

        threshold = self.settings.renewal_threshold_days
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold <= 0:
            result['is_valid'] = False
            result['errors'].append(f"续期阈值必须是正整数: {threshold!r}")

        if not self.settings.live_dir:
            result['is_valid'] = False
            result['errors'].append("live_dir 未设置")

        if not self.settings.ansible_playbook:
            result['is_valid'] = False
            result['errors'].append("ansible_playbook 未设置")

        self._merge(result, self.validate_notification())
        return result

    def validate_for_issue(self) -> Dict[str, Any]:
        """
        验证签发证书所需配置

        Returns:
            Dict[str, Any]: 验证结果
        """
        result = self._new_result()

        for key, description in self.required_issue_keys.items():
            if not getattr(self.settings, key):
                result['is_valid'] = False
                result['errors'].append(f"缺少必需的配置项: {key} ({description})")

        token = self.settings.cloudflare_api_token
        if token == PLACEHOLDER_API_TOKEN:
            result['is_valid'] = False
            result['errors'].append(
                "cloudflare_api_token 仍是模板占位符，请在 https://dash.cloudflare.com/profile/api-tokens "
                "创建具有 Zone.DNS Edit 权限的令牌"
            )

        email = self.settings.email
        if email and not re.match(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', email):
            result['is_valid'] = False
            result['errors'].append(f"邮箱格式无效: {email}")

        if not self.settings.username:
            result['warnings'].append(f"username 未设置，凭证目录使用 {self.settings.credentials_dir}")

        return result

    def validate_notification(self) -> Dict[str, Any]:
        """
        验证SNS通知配置（可选功能，只产生警告或格式错误）

        Returns:
            Dict[str, Any]: 验证结果
        """
        result = self._new_result()

        if self.settings.notify_on not in self.NOTIFY_MODES:
            result['is_valid'] = False
            result['errors'].append(
                f"notify_on 必须是 {' / '.join(self.NOTIFY_MODES)} 之一: {self.settings.notify_on}"
            )

        topic_arn = self.settings.sns_topic_arn
        if not topic_arn:
            result['warnings'].append("SNS_TOPIC_ARN 未设置，不发送续期报告")
            return result

        arn_pattern = r'^arn:aws:sns:[a-z0-9-]+:\d{12}:[a-zA-Z0-9_-]+$'
        if not re.match(arn_pattern, topic_arn):
            result['is_valid'] = False
            result['errors'].append(f"SNS主题ARN格式无效: {topic_arn}")

        return result

    def _merge(self, target: Dict[str, Any], other: Dict[str, Any]):
        if not other['is_valid']:
            target['is_valid'] = False
        target['errors'].extend(other['errors'])
        target['warnings'].extend(other['warnings'])

    def get_configuration_summary(self, validation_result: Dict[str, Any]) -> str:
        """
        获取配置验证摘要

        Args:
            validation_result: validate_for_* 的返回值

        Returns:
            str: 摘要文本
        """
        lines = [
            "配置验证摘要",
            "=" * 30
        ]

        if validation_result['is_valid']:
            lines.append("✅ 配置验证通过")
        else:
            lines.append("❌ 配置验证失败")

        if validation_result['errors']:
            lines.append("\n错误:")
            for error in validation_result['errors']:
                lines.append(f"  • {error}")

        if validation_result['warnings']:
            lines.append("\n警告:")
            for warning in validation_result['warnings']:
                lines.append(f"  • {warning}")

        return "\n".join(lines)
