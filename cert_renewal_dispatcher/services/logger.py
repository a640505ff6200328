"""
日志服务
"""
import os
import logging
import traceback
from typing import Dict, Any, Optional
from ..interfaces import LoggerServiceInterface
from ..models import DomainRecord, Outcome, RenewalReport


class LoggerService(LoggerServiceInterface):
    """日志服务实现"""

    def __init__(self, logger_name: str = "cert_renewal_dispatcher", log_level: Optional[str] = None):
        """
        初始化日志服务

        Args:
            logger_name: 日志器名称
            log_level: 日志级别，如果为None则从环境变量读取
        """
        self.logger_name = logger_name
        self.log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')

        # 配置日志器
        self.logger = logging.getLogger(logger_name)
        self._configure_logger()

    def _configure_logger(self):
        """配置日志器"""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        self.logger.setLevel(level)

        # 避免重复添加处理器
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(level)

            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            handler.setFormatter(formatter)

            self.logger.addHandler(handler)
        else:
            for handler in self.logger.handlers:
                handler.setLevel(level)

        # 防止日志传播到根日志器
        self.logger.propagate = False

    def log_run_start(self, report: RenewalReport, domain_count: int):
        """
        记录续期检查开始

        Args:
            report: 本次运行的续期报告
            domain_count: 发现的域名数量
        """
        self.logger.info(f"开始证书续期检查，共发现 {domain_count} 个域名")
        if report.start_time:
            self.logger.info(f"检查开始时间: {report.start_time.isoformat()}")

    def log_domain_checked(self, record: DomainRecord, threshold_days: int):
        """
        记录证书剩余有效期

        Args:
            record: 域名记录
            threshold_days: 续期阈值
        """
        expiry = record.expiry_date.isoformat() if record.expiry_date else "unknown"
        if record.days_until_expiry is not None and record.days_until_expiry <= threshold_days:
            self.logger.warning(
                f"证书需要续期 - 域名: {record.domain}, 过期时间: {expiry}, "
                f"剩余天数: {record.days_until_expiry} 天 (阈值: {threshold_days} 天)"
            )
        else:
            self.logger.info(
                f"证书有效 - 域名: {record.domain}, 过期时间: {expiry}, "
                f"剩余天数: {record.days_until_expiry} 天"
            )

    def log_domain_outcome(self, record: DomainRecord):
        """
        记录域名处理结果

        Args:
            record: 已确定结果的域名记录
        """
        if record.outcome == Outcome.SKIPPED_VALID:
            self.logger.info(f"{record.domain}: 证书有效期 {record.days_until_expiry} 天，无需续期")
        elif record.outcome == Outcome.RENEWED_DEPLOYED:
            self.logger.info(f"{record.domain}: 证书续期并部署成功")
        elif record.outcome == Outcome.RENEWED_DEPLOY_FAILED:
            self.logger.error(
                f"{record.domain}: 证书已续期但部署失败，服务器仍在使用旧证书 - {record.error_message}"
            )
        else:
            self.logger.error(f"{record.domain}: {record.label} - {record.error_message}")

    def log_error(self, domain: str, stage: str, error: Exception):
        """
        记录错误信息

        Args:
            domain: 域名
            stage: 出错阶段
            error: 异常对象
        """
        self.logger.error(
            f"域名 {domain} 在 {stage} 阶段发生错误: {type(error).__name__}: {str(error)}"
        )

        # 详细的堆栈跟踪（调试级别）
        self.logger.debug(f"域名 {domain} 错误堆栈跟踪:\n{traceback.format_exc()}")

    def log_run_end(self, report: RenewalReport):
        """记录续期检查结束"""
        self.logger.info("证书续期检查完成")
        self.logger.info(f"总执行时间: {report.execution_time:.2f} 秒")

    def log_notification_sent(self, notification_type: str, success: bool):
        if success:
            self.logger.info(f"{notification_type} 续期报告发送成功")
        else:
            self.logger.error(f"{notification_type} 续期报告发送失败")

    def log_configuration_info(self, config: Dict[str, Any]):
        """
        记录配置信息

        Args:
            config: 配置信息字典
        """
        safe_config = self._sanitize_config(config)

        self.logger.info("系统配置信息:")
        for key, value in safe_config.items():
            self.logger.info(f"  {key}: {value}")

    def _sanitize_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        清理配置信息中的敏感数据

        Args:
            config: 原始配置

        Returns:
            Dict[str, Any]: 清理后的配置
        """
        safe_config = {}
        for key, value in config.items():
            key_lower = key.lower()

            is_sensitive = (
                key_lower in ('password', 'secret', 'token', 'key', 'sns_topic_arn') or
                key_lower.endswith('_key') or
                key_lower.endswith('_secret') or
                key_lower.endswith('_password') or
                key_lower.endswith('_token')
            )

            if is_sensitive and isinstance(value, str) and value:
                if value.startswith('arn:'):
                    # ARN只显示前缀和后缀
                    parts = value.split(':')
                    if len(parts) >= 6:
                        safe_value = f"{':'.join(parts[:3])}:***:{parts[-2]}:{parts[-1]}"
                    else:
                        safe_value = "***"
                elif len(value) > 12:
                    safe_value = f"{value[:8]}...{value[-4:]}"
                else:
                    safe_value = "***"
                safe_config[key] = safe_value
            else:
                safe_config[key] = value

        return safe_config

    def log_execution_summary(self, report: RenewalReport):
        """
        记录续期汇总

        Args:
            report: 续期报告
        """
        self.logger.info("=" * 50)
        self.logger.info("续期汇总")
        self.logger.info("=" * 50)
        self.logger.info(f"执行时长: {report.execution_time:.2f} 秒")
        self.logger.info(f"总域名数: {report.total_domains}")

        if report.renewed_successful:
            self.logger.info(f"续期并部署成功 {len(report.renewed_successful)} 个:")
            for record in report.renewed_successful:
                self.logger.info(f"  - {record.domain}")

        if report.failed:
            self.logger.error(f"处理失败 {len(report.failed)} 个:")
            for record in report.failed:
                self.logger.error(f"  - {record.domain} ({record.label})")

        if report.untouched:
            self.logger.info(f"无需续期 {len(report.untouched)} 个")

        if not report.renewed_successful and not report.failed:
            self.logger.info("所有证书均有效，无需续期")

        self.logger.info("=" * 50)
