"""
服务接口定义
"""
from abc import ABC, abstractmethod
from typing import List
from .models import DomainRecord, RenewalReport


class CertificateStoreInterface(ABC):
    """证书存储接口"""

    @abstractmethod
    def list_domains(self) -> List[str]:
        """列出存储中的域名"""
        pass

    @abstractmethod
    def certificate_path(self, domain: str) -> str:
        """获取域名证书文件路径"""
        pass

    @abstractmethod
    def read_certificate(self, domain: str) -> bytes:
        """读取域名证书内容"""
        pass


class RenewerInterface(ABC):
    """证书续期接口"""

    @abstractmethod
    def renew(self, domain: str, force: bool = False) -> None:
        """续期单个证书，失败时抛出RenewFailed"""
        pass


class DeployerInterface(ABC):
    """证书部署接口"""

    @abstractmethod
    def deploy(self, domain: str) -> None:
        """部署单个证书，失败时抛出DeployFailed"""
        pass


class TimerControlInterface(ABC):
    """自动续期定时器控制接口"""

    @abstractmethod
    def exists(self) -> bool:
        """定时器是否存在"""
        pass

    @abstractmethod
    def is_active(self) -> bool:
        """定时器是否处于活动状态"""
        pass

    @abstractmethod
    def disable(self) -> bool:
        """停止并禁用定时器"""
        pass


class NotificationServiceInterface(ABC):
    """通知服务接口"""

    @abstractmethod
    def should_notify(self, report: RenewalReport) -> bool:
        """判断是否需要发送报告"""
        pass

    @abstractmethod
    def send_renewal_report(self, report: RenewalReport) -> bool:
        """发送续期报告"""
        pass

    @abstractmethod
    def format_report_content(self, report: RenewalReport) -> str:
        """格式化报告内容"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_run_start(self, report: RenewalReport, domain_count: int):
        """记录运行开始"""
        pass

    @abstractmethod
    def log_domain_outcome(self, record: DomainRecord):
        """记录域名处理结果"""
        pass

    @abstractmethod
    def log_error(self, domain: str, stage: str, error: Exception):
        """记录错误信息"""
        pass
