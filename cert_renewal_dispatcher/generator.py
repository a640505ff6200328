"""
证书批量签发
"""
import os
import logging
from typing import Iterable, Optional

from .models import IssueReport
from .settings import Settings
from .services.certbot_client import CertbotClient, write_cloudflare_credentials
from .services.command_runner import CommandRunner
from .services.config_validator import ConfigValidator
from .services.error_handler import ConfigurationError
from .services.logger import LoggerService


class CertificateGenerator:
    """通过Cloudflare DNS-01验证批量签发证书"""

    def __init__(self, settings: Settings, certbot: Optional[CertbotClient] = None,
                 logger_service: Optional[LoggerService] = None):
        self.settings = settings
        self.certbot = certbot or CertbotClient(
            runner=CommandRunner(sudo_command=settings.sudo_command),
            certbot_command=settings.certbot_command
        )
        self.logger_service = logger_service or LoggerService(log_level=settings.log_level)
        self.logger = logging.getLogger(__name__)

    def validate(self):
        """
        验证签发配置

        Raises:
            ConfigurationError: 配置无效
        """
        validator = ConfigValidator(self.settings)
        result = validator.validate_for_issue()
        for warning in result['warnings']:
            self.logger.warning(warning)
        if not result['is_valid']:
            raise ConfigurationError(validator.get_configuration_summary(result))

    def execute(self, domains: Iterable[str], non_interactive: bool = False,
                force_renewal: bool = False) -> IssueReport:
        """
        为每个域名签发证书，单个域名失败不影响其他域名

        Args:
            domains: 域名列表
            non_interactive: 传递 --non-interactive
            force_renewal: 传递 --force-renewal

        Returns:
            IssueReport: 签发结果

        Raises:
            ConfigurationError: 配置无效或凭证文件无法写入
        """
        self.validate()
        domains = list(domains)
        self.logger_service.log_configuration_info(self.settings.to_dict())
        self.logger_service.logger.info(f"开始签发 {len(domains)} 个域名的证书")

        try:
            credentials_path = write_cloudflare_credentials(
                self.settings.credentials_dir,
                self.settings.dns_zone,
                self.settings.cloudflare_api_token
            )
        except OSError as e:
            raise ConfigurationError(
                f"无法写入Cloudflare凭证文件到 {self.settings.credentials_dir}: {str(e)}"
            ) from e
        self.logger.info(f"Cloudflare凭证文件已写入: {credentials_path}")

        report = IssueReport()
        for domain in domains:
            self.logger_service.logger.info(f"=== 处理: {domain} ===")
            ok = self.certbot.issue(
                domain,
                self.settings.email,
                credentials_path,
                non_interactive=non_interactive,
                force_renewal=force_renewal
            )
            if not ok:
                report.failed.append(domain)
                continue

            report.issued.append(domain)
            live_path = os.path.join(self.settings.live_dir, domain)
            if os.path.isdir(live_path):
                self.logger_service.logger.info(f"证书已签发: {domain}")
            else:
                # live目录通常只有root可读
                message = f"certbot执行成功，但无法确认证书目录 {live_path}"
                report.warnings.append(message)
                self.logger_service.logger.warning(message)

        self.logger_service.logger.info(
            f"签发完成: 成功 {len(report.issued)} 个, 失败 {len(report.failed)} 个"
        )
        for domain in report.failed:
            self.logger_service.logger.error(f"  - {domain} (issue failed)")

        return report
