"""
证书续期调度入口
"""
from datetime import datetime, timezone
from typing import Optional

from .interfaces import (
    CertificateStoreInterface,
    DeployerInterface,
    NotificationServiceInterface,
    RenewerInterface,
    TimerControlInterface,
)
from .models import DomainRecord, Outcome, RenewalReport
from .settings import Settings
from .services.ansible_deployer import AnsibleDeployer
from .services.certbot_client import CertbotClient
from .services.certificate_store import CertificateStore
from .services.command_runner import CommandRunner
from .services.error_handler import (
    ElevationErrorHandler,
    CertificateReadError,
    DeployFailed,
    RenewFailed,
)
from .services.expiry_calculator import ExpiryCalculator
from .services.logger import LoggerService
from .services.sns_notification import SNSNotificationService
from .services.timer_guard import SystemdTimerControl, ensure_no_competing_timer


class RenewalDispatcher:
    """证书续期调度器主类"""

    def __init__(self, store: CertificateStoreInterface, expiry_calculator: ExpiryCalculator,
                 renewer: RenewerInterface, deployer: DeployerInterface,
                 timer_control: Optional[TimerControlInterface] = None,
                 logger_service: Optional[LoggerService] = None,
                 notification_service: Optional[NotificationServiceInterface] = None,
                 force: bool = False):
        """
        初始化调度器

        Args:
            store: 证书存储
            expiry_calculator: 过期计算器（持有续期阈值）
            renewer: 续期能力
            deployer: 部署能力
            timer_control: 冲突定时器控制，为None时跳过检查
            logger_service: 日志服务
            notification_service: 通知服务（可选）
            force: 是否对所有可读证书强制续期
        """
        self.store = store
        self.expiry_calculator = expiry_calculator
        self.renewer = renewer
        self.deployer = deployer
        self.timer_control = timer_control
        self.logger_service = logger_service or LoggerService()
        self.notification_service = notification_service
        self.force = force
        self.error_handler = ElevationErrorHandler()

    @classmethod
    def from_settings(cls, settings: Settings, force: bool = False,
                      check_timer: bool = True) -> "RenewalDispatcher":
        """
        根据配置构建调度器及其全部服务组件

        Args:
            settings: 运行配置
            force: 是否强制续期
            check_timer: 是否在运行前检查冲突定时器

        Returns:
            RenewalDispatcher: 调度器
        """
        runner = CommandRunner(sudo_command=settings.sudo_command)
        logger_service = LoggerService(log_level=settings.log_level)
        logger_service.log_configuration_info(settings.to_dict())

        notification_service = None
        if settings.sns_topic_arn:
            notification_service = SNSNotificationService(
                topic_arn=settings.sns_topic_arn,
                notify_on=settings.notify_on
            )

        timer_control = None
        if check_timer:
            timer_control = SystemdTimerControl(
                timer_name=settings.timer_name,
                service_name=settings.timer_service_name,
                runner=runner
            )

        return cls(
            store=CertificateStore(settings.live_dir, settings.cert_filename, runner=runner),
            expiry_calculator=ExpiryCalculator(settings.renewal_threshold_days),
            renewer=CertbotClient(runner=runner, certbot_command=settings.certbot_command),
            deployer=AnsibleDeployer(
                playbook=settings.ansible_playbook,
                inventory_file=settings.inventory_file,
                playbook_dir=settings.ansible_playbook_dir,
                runner=runner,
                ansible_playbook_command=settings.ansible_playbook_command
            ),
            timer_control=timer_control,
            logger_service=logger_service,
            notification_service=notification_service,
            force=force
        )

    def execute(self) -> RenewalReport:
        """
        执行一次续期检查

        Returns:
            RenewalReport: 续期报告

        Raises:
            StoreUnavailable: 无法列出证书存储（不处理任何域名）
            TimerConflict: 无法禁用活动的自动续期定时器
        """
        report = RenewalReport(start_time=datetime.now(timezone.utc))

        if self.timer_control is not None:
            ensure_no_competing_timer(self.timer_control)

        domains = self.store.list_domains()

        if not domains:
            self.logger_service.logger.warning("证书存储中没有找到任何域名")

        self.logger_service.log_run_start(report, len(domains))
        for domain in domains:
            self.logger_service.logger.info(f"  - {domain}")

        for domain in domains:
            record = DomainRecord(domain=domain, cert_path=self.store.certificate_path(domain))
            report.records.append(record)
            self.process_domain(record)
            self.logger_service.log_domain_outcome(record)

        report.end_time = datetime.now(timezone.utc)
        self.logger_service.log_run_end(report)
        self.logger_service.log_execution_summary(report)

        self._send_report(report)

        return report

    def process_domain(self, record: DomainRecord) -> Outcome:
        """
        处理单个域名：读取有效期 -> 判断 -> 续期 -> 部署

        Args:
            record: 新发现的域名记录

        Returns:
            Outcome: 最终结果
        """
        domain = record.domain
        self.logger_service.logger.info(f"检查证书: {domain}")

        try:
            pem_data = self.store.read_certificate(domain)
            record.expiry_date = self.expiry_calculator.parse_expiry_date(pem_data)
        except CertificateReadError as e:
            self.logger_service.log_error(domain, "read", e)
            record.resolve(Outcome.READ_ERROR, self.error_handler.describe_error("read", e), "read")
            return record.outcome

        record.days_until_expiry = self.expiry_calculator.calculate_days_until_expiry(record.expiry_date)
        self.logger_service.log_domain_checked(record, self.expiry_calculator.threshold_days)

        due = self.force or self.expiry_calculator.is_due_for_renewal(record.days_until_expiry)
        if not due:
            record.resolve(Outcome.SKIPPED_VALID)
            return record.outcome

        try:
            self.renewer.renew(domain, force=self.force)
        except RenewFailed as e:
            self.logger_service.log_error(domain, "renew", e)
            record.resolve(Outcome.RENEW_FAILED, self.error_handler.describe_error("renew", e), "renew")
            return record.outcome

        try:
            self.deployer.deploy(domain)
        except DeployFailed as e:
            self.logger_service.log_error(domain, "deploy", e)
            record.resolve(
                Outcome.RENEWED_DEPLOY_FAILED, self.error_handler.describe_error("deploy", e), "deploy"
            )
            return record.outcome

        record.resolve(Outcome.RENEWED_DEPLOYED)
        return record.outcome

    def _send_report(self, report: RenewalReport) -> bool:
        """
        发送续期报告（通知失败不影响运行结果）

        Args:
            report: 续期报告

        Returns:
            bool: 是否发送成功（未发送时为False）
        """
        if self.notification_service is None:
            return False

        if not self.notification_service.should_notify(report):
            self.logger_service.logger.info("无需发送续期报告")
            return False

        success = self.notification_service.send_renewal_report(report)
        self.logger_service.log_notification_sent("SNS", success)
        return success
