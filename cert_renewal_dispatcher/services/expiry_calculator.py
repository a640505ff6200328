"""
证书过期计算服务
"""
from datetime import datetime, timezone
from typing import Optional

from cryptography import x509

from .error_handler import CertificateReadError, ConfigurationError


class ExpiryCalculator:
    """证书过期计算器"""

    def __init__(self, threshold_days: int = 14):
        """
        初始化过期计算器

        Args:
            threshold_days: 续期阈值天数，剩余天数小于等于该值时需要续期

        Raises:
            ConfigurationError: 阈值不是正整数
        """
        if isinstance(threshold_days, bool) or not isinstance(threshold_days, int) or threshold_days <= 0:
            raise ConfigurationError(f"续期阈值必须是正整数: {threshold_days!r}")
        self.threshold_days = threshold_days

    def parse_expiry_date(self, pem_data: bytes) -> datetime:
        """
        解析PEM证书的过期时间

        Args:
            pem_data: PEM格式证书内容

        Returns:
            datetime: 过期时间（UTC）

        Raises:
            CertificateReadError: 证书内容无法解析
        """
        try:
            cert = x509.load_pem_x509_certificate(pem_data)
        except ValueError as e:
            raise CertificateReadError(f"无法解析证书: {str(e)}") from e

        return cert.not_valid_after_utc

    def calculate_days_until_expiry(self, expiry_date: datetime, now: Optional[datetime] = None) -> int:
        """
        计算距离过期的天数（向下取整）

        Args:
            expiry_date: 过期时间
            now: 当前时间，默认为UTC当前时间

        Returns:
            int: 剩余天数（负数表示已过期）
        """
        now = now or datetime.now(timezone.utc)
        delta = expiry_date - now
        # timedelta.days 对负数同样向下取整
        return delta.days

    def is_due_for_renewal(self, days_until_expiry: int) -> bool:
        """
        判断证书是否需要续期（边界包含：剩余天数等于阈值时续期）

        Args:
            days_until_expiry: 剩余天数

        Returns:
            bool: 是否需要续期
        """
        return days_until_expiry <= self.threshold_days
