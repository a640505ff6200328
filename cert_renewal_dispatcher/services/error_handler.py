"""
错误处理服务
"""
import logging
from typing import Callable, Any


class CertRenewalError(Exception):
    """证书续期系统基础异常"""


class ConfigurationError(CertRenewalError):
    """配置缺失或无效"""


class CommandError(CertRenewalError):
    """外部命令无法执行或执行失败"""

    def __init__(self, message: str, command=None, returncode=None, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class StoreUnavailable(CertRenewalError):
    """证书存储目录不存在或不可读（致命错误）"""


class CertificateReadError(CertRenewalError):
    """单个证书无法定位、读取或解析"""


class RenewFailed(CertRenewalError):
    """单个证书续期失败"""


class DeployFailed(CertRenewalError):
    """单个证书部署失败（本地已续期，服务器未更新）"""


class TimerConflict(CertRenewalError):
    """无法禁用冲突的自动续期定时器"""


class ElevationErrorHandler:
    """权限提升错误处理器"""

    def __init__(self):
        """初始化权限提升错误处理器"""
        self.logger = logging.getLogger(__name__)

        # 触发提权重试的错误类型
        self.elevatable_errors = (OSError, CommandError)

    def with_elevation(self, direct: Callable, elevated: Callable, *args, **kwargs) -> Any:
        """
        先以普通权限执行，失败后以提升权限重试一次

        Args:
            direct: 普通权限执行的函数
            elevated: 提升权限执行的函数
            *args: 函数参数
            **kwargs: 函数关键字参数

        Returns:
            Any: 函数执行结果

        Raises:
            Exception: 提升权限后仍然失败时的异常
        """
        try:
            return direct(*args, **kwargs)

        except self.elevatable_errors as e:
            self.logger.warning(
                f"普通权限执行失败: {type(e).__name__}: {str(e)}，尝试使用sudo重试"
            )

        try:
            return elevated(*args, **kwargs)
        except self.elevatable_errors as e:
            self.logger.error(f"提升权限后仍然失败: {type(e).__name__}: {str(e)}")
            raise

    def describe_error(self, stage: str, error: Exception) -> str:
        """
        生成带阶段信息的错误描述

        Args:
            stage: 处理阶段
            error: 异常对象

        Returns:
            str: 错误描述
        """
        return f"{stage}: {type(error).__name__}: {str(error)}"
