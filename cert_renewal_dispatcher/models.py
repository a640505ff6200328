"""
数据模型定义
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List


class Outcome(Enum):
    """单个域名在一次运行中的最终结果"""
    SKIPPED_VALID = "skipped-valid"
    RENEWED_DEPLOYED = "renewed-deployed"
    RENEWED_DEPLOY_FAILED = "renewed-deploy-failed"
    RENEW_FAILED = "renew-failed"
    READ_ERROR = "read-error"

    @property
    def is_success(self) -> bool:
        """是否为成功结果"""
        return self in (Outcome.SKIPPED_VALID, Outcome.RENEWED_DEPLOYED)


@dataclass
class DomainRecord:
    """证书存储中发现的域名记录"""
    domain: str
    cert_path: str
    days_until_expiry: Optional[int] = None
    expiry_date: Optional[datetime] = None
    outcome: Optional[Outcome] = None
    error_message: Optional[str] = None
    stage: Optional[str] = None

    def resolve(self, outcome: Outcome, error_message: Optional[str] = None,
                stage: Optional[str] = None) -> None:
        """
        设置最终结果（每次运行只能设置一次）

        Args:
            outcome: 最终结果
            error_message: 错误信息
            stage: 失败阶段（read / renew / deploy）

        Raises:
            ValueError: 结果已经设置过
        """
        if self.outcome is not None:
            raise ValueError(
                f"域名 {self.domain} 的结果已经是 {self.outcome.value}，不能再设置为 {outcome.value}"
            )
        self.outcome = outcome
        self.error_message = error_message
        self.stage = stage

    @property
    def label(self) -> str:
        """用于报告的结果标签"""
        return self.outcome.value if self.outcome else "pending"


@dataclass
class RenewalReport:
    """续期运行结果统计"""
    records: List[DomainRecord] = field(default_factory=list)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def total_domains(self) -> int:
        return len(self.records)

    @property
    def renewed_successful(self) -> List[DomainRecord]:
        """续期并部署成功的域名"""
        return [r for r in self.records if r.outcome == Outcome.RENEWED_DEPLOYED]

    @property
    def failed(self) -> List[DomainRecord]:
        """所有非成功结果的域名"""
        return [r for r in self.records if r.outcome is not None and not r.outcome.is_success]

    @property
    def untouched(self) -> List[DomainRecord]:
        """证书仍然有效、未做处理的域名"""
        return [r for r in self.records if r.outcome == Outcome.SKIPPED_VALID]

    @property
    def deploy_failed(self) -> List[DomainRecord]:
        """已续期但未部署的域名（本地与服务器证书不一致）"""
        return [r for r in self.records if r.outcome == Outcome.RENEWED_DEPLOY_FAILED]

    @property
    def has_failures(self) -> bool:
        return len(self.failed) > 0

    @property
    def exit_code(self) -> int:
        return 1 if self.has_failures else 0

    @property
    def execution_time(self) -> float:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0


@dataclass
class IssueReport:
    """证书签发结果统计"""
    issued: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
