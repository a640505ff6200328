"""
证书存储读取服务
"""
import os
import logging
from typing import List, Optional

from ..interfaces import CertificateStoreInterface
from .command_runner import CommandRunner
from .error_handler import (
    ElevationErrorHandler,
    CommandError,
    StoreUnavailable,
    CertificateReadError,
)


class CertificateStore(CertificateStoreInterface):
    """Let's Encrypt live目录读取器"""

    def __init__(self, live_dir: str = "/etc/letsencrypt/live", cert_filename: str = "cert.pem",
                 runner: Optional[CommandRunner] = None):
        """
        初始化证书存储

        Args:
            live_dir: 证书存储根目录，每个域名一个子目录
            cert_filename: 子目录中的证书文件名
            runner: 命令执行器，用于sudo回退
        """
        self.live_dir = live_dir
        self.cert_filename = cert_filename
        self.runner = runner or CommandRunner()
        self.error_handler = ElevationErrorHandler()
        self.logger = logging.getLogger(__name__)

    def list_domains(self) -> List[str]:
        """
        列出存储根目录下的所有域名子目录（按字典序排序）

        Returns:
            List[str]: 域名列表

        Raises:
            StoreUnavailable: 根目录不存在或不是目录，或提升权限后仍无法列出
        """
        if not os.path.lexists(self.live_dir) and self._parent_readable():
            raise StoreUnavailable(f"证书目录不存在: {self.live_dir}")
        if os.path.exists(self.live_dir) and not os.path.isdir(self.live_dir):
            raise StoreUnavailable(f"证书存储路径不是目录: {self.live_dir}")

        try:
            domains = self.error_handler.with_elevation(
                self._list_direct, self._list_elevated
            )
        except (OSError, CommandError) as e:
            raise StoreUnavailable(f"无法读取证书目录 {self.live_dir}: {str(e)}") from e

        return sorted(domains)

    def certificate_path(self, domain: str) -> str:
        return os.path.join(self.live_dir, domain, self.cert_filename)

    def read_certificate(self, domain: str) -> bytes:
        """
        读取证书文件内容，普通权限失败时使用sudo重试

        Args:
            domain: 域名

        Returns:
            bytes: PEM证书内容

        Raises:
            CertificateReadError: 提升权限后仍无法读取
        """
        path = self.certificate_path(domain)

        try:
            return self.error_handler.with_elevation(
                self._read_direct, self._read_elevated, path
            )
        except (OSError, CommandError) as e:
            raise CertificateReadError(f"无法读取证书文件 {path}: {str(e)}") from e

    def _parent_readable(self) -> bool:
        parent = os.path.dirname(os.path.abspath(self.live_dir))
        return os.access(parent, os.R_OK | os.X_OK)

    def _list_direct(self) -> List[str]:
        with os.scandir(self.live_dir) as entries:
            return [entry.name for entry in entries if entry.is_dir()]

    def _list_elevated(self) -> List[str]:
        # ls -p 在目录名后追加 "/"
        result = self.runner.run(["ls", "-1", "-p", self.live_dir], elevated=True, check=True)
        return [
            line[:-1] for line in result.stdout.splitlines()
            if line.endswith("/") and len(line) > 1
        ]

    def _read_direct(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def _read_elevated(self, path: str) -> bytes:
        result = self.runner.run(["cat", path], elevated=True, check=True, text=False)
        return result.stdout
