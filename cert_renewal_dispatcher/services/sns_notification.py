"""
SNS通知服务
"""
import os
import time
import logging
from datetime import datetime
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..interfaces import NotificationServiceInterface
from ..models import RenewalReport


class SNSNotificationService(NotificationServiceInterface):
    """SNS续期报告通知服务"""

    def __init__(self, topic_arn: Optional[str] = None, region_name: Optional[str] = None,
                 notify_on: str = "failures"):
        """
        初始化SNS通知服务

        Args:
            topic_arn: SNS主题ARN，如果为None则从环境变量读取
            region_name: AWS区域名称，如果为None则自动检测
            notify_on: failures 只在有失败时发送，always 每次运行都发送
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')
        self.notify_on = notify_on

        # 自动检测区域
        if region_name:
            self.region_name = region_name
        elif self.topic_arn and self.topic_arn.startswith('arn:aws:sns:'):
            # 从SNS ARN中提取区域
            self.region_name = self.topic_arn.split(':')[3]
        else:
            self.region_name = os.getenv('AWS_REGION', 'us-east-1')

        self.logger = logging.getLogger(__name__)

        self.sns_client = None
        if self.topic_arn:
            try:
                self.sns_client = boto3.client('sns', region_name=self.region_name)
                self.logger.info(f"SNS客户端初始化成功，区域: {self.region_name}")
            except Exception as e:
                self.logger.error(f"初始化SNS客户端失败: {str(e)}")

    @property
    def enabled(self) -> bool:
        return bool(self.topic_arn)

    def should_notify(self, report: RenewalReport) -> bool:
        """
        判断本次运行是否需要发送报告

        Args:
            report: 续期报告

        Returns:
            bool: 是否发送
        """
        if not self.enabled:
            return False
        if self.notify_on == "always":
            return True
        return report.has_failures

    def send_renewal_report(self, report: RenewalReport) -> bool:
        """
        发送续期报告

        Args:
            report: 续期报告

        Returns:
            bool: 发送是否成功
        """
        if not self._validate_configuration():
            return False

        subject = self._format_subject(report)
        message = self.format_report_content(report)

        return self._publish_with_retry(subject, message)

    def _publish_with_retry(self, subject: str, message: str, max_retries: int = 3) -> bool:
        """
        带重试机制的SNS消息发布

        Args:
            subject: 消息主题
            message: 消息内容
            max_retries: 最大重试次数

        Returns:
            bool: 发送是否成功
        """
        for attempt in range(max_retries + 1):
            try:
                response = self.sns_client.publish(
                    TopicArn=self.topic_arn,
                    Subject=subject,
                    Message=message
                )

                message_id = response.get('MessageId')
                self.logger.info(f"SNS通知发送成功，MessageId: {message_id}")
                return True

            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']

                if self._is_retryable_error(error_code) and attempt < max_retries:
                    wait_time = 2 ** attempt  # 指数退避
                    self.logger.warning(
                        f"SNS发送失败 (尝试 {attempt + 1}/{max_retries + 1}) - {error_code}: {error_message}，"
                        f"{wait_time}秒后重试"
                    )
                    time.sleep(wait_time)
                    continue

                self.logger.error(f"SNS发送失败 - {error_code}: {error_message}")
                return False

            except BotoCoreError as e:
                self.logger.error(f"发送SNS通知时发生错误: {str(e)}")
                return False

        return False

    def _is_retryable_error(self, error_code: str) -> bool:
        retryable_errors = {
            'Throttling',
            'ServiceUnavailable',
            'InternalError',
            'RequestTimeout'
        }
        return error_code in retryable_errors

    def format_report_content(self, report: RenewalReport) -> str:
        """
        格式化续期报告内容

        Args:
            report: 续期报告

        Returns:
            str: 报告文本
        """
        lines = [
            "证书续期报告",
            "=" * 30,
            f"运行时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"执行时长: {report.execution_time:.2f} 秒",
            f"总域名数: {report.total_domains}",
            ""
        ]

        if report.deploy_failed:
            lines.extend([
                "🚨 已续期但部署失败（服务器仍使用旧证书）:",
                ""
            ])
            for record in report.deploy_failed:
                lines.append(f"• {record.domain}")
                lines.append(f"  错误: {record.error_message}")
            lines.append("")

        other_failures = [r for r in report.failed if r not in report.deploy_failed]
        if other_failures:
            lines.extend([
                "❌ 处理失败:",
                ""
            ])
            for record in other_failures:
                lines.append(f"• {record.domain} ({record.label})")
                lines.append(f"  错误: {record.error_message}")
            lines.append("")

        if report.renewed_successful:
            lines.append("✅ 续期并部署成功:")
            for record in report.renewed_successful:
                lines.append(f"• {record.domain}")
            lines.append("")

        if report.untouched:
            lines.append("证书有效，无需续期:")
            for record in report.untouched:
                lines.append(f"• {record.domain} - 剩余 {record.days_until_expiry} 天")
            lines.append("")

        lines.extend([
            "---",
            "此报告由证书续期系统自动生成"
        ])

        return "\n".join(lines)

    def _format_subject(self, report: RenewalReport) -> str:
        if report.has_failures:
            return (
                f"🚨 证书续期: {len(report.failed)}个失败, "
                f"{len(report.renewed_successful)}个成功 | {report.total_domains}个域名"
            )
        if report.renewed_successful:
            return f"✅ 证书续期: {len(report.renewed_successful)}个已续期并部署 | {report.total_domains}个域名"
        return f"✅ 证书续期: 全部有效 | {report.total_domains}个域名"

    def _validate_configuration(self) -> bool:
        """
        验证配置是否正确

        Returns:
            bool: 配置是否有效
        """
        if not self.topic_arn:
            self.logger.error("SNS主题ARN未配置")
            return False

        if not self.sns_client:
            self.logger.error("SNS客户端未初始化")
            return False

        return True
