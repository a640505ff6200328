"""
Certbot调用服务
"""
import os
import logging
from typing import List, Optional

from ..interfaces import RenewerInterface
from .command_runner import CommandRunner
from .error_handler import CommandError, RenewFailed


class CertbotClient(RenewerInterface):
    """Certbot命令封装（续期与签发）"""

    def __init__(self, runner: Optional[CommandRunner] = None, certbot_command: str = "certbot"):
        """
        初始化Certbot客户端

        Args:
            runner: 命令执行器
            certbot_command: certbot可执行文件
        """
        self.runner = runner or CommandRunner()
        self.certbot_command = certbot_command
        self.logger = logging.getLogger(__name__)

    def renew(self, domain: str, force: bool = False) -> None:
        """
        续期单个证书（sudo certbot renew --cert-name <domain>）

        Args:
            domain: 证书名称
            force: 是否强制续期

        Raises:
            RenewFailed: certbot执行失败
        """
        args = [self.certbot_command, "renew", "--cert-name", domain, "--quiet"]
        if force:
            args.append("--force-renewal")

        self.logger.info(f"续期证书: {domain}")

        try:
            result = self.runner.run(args, elevated=True)
        except CommandError as e:
            raise RenewFailed(f"无法调用certbot续期 {domain}: {str(e)}") from e

        if not result.ok:
            raise RenewFailed(
                f"certbot续期 {domain} 失败（退出码 {result.returncode}）: {result.stderr.strip()}"
            )

    def build_issue_command(self, domain: str, email: str, credentials_path: str,
                            non_interactive: bool = False, force_renewal: bool = False) -> List[str]:
        """
        构建使用Cloudflare DNS-01验证签发证书的命令

        Args:
            domain: 域名
            email: 注册邮箱
            credentials_path: Cloudflare凭证文件路径
            non_interactive: 非交互模式
            force_renewal: 强制重新签发

        Returns:
            List[str]: certbot命令参数
        """
        args = [
            self.certbot_command, "certonly",
            "--dns-cloudflare",
            "--dns-cloudflare-credentials", credentials_path,
            "--preferred-challenges", "dns",
            "--agree-tos",
            "--email", email,
            "-d", domain,
        ]
        if non_interactive:
            args.append("--non-interactive")
        if force_renewal:
            args.append("--force-renewal")
        return args

    def issue(self, domain: str, email: str, credentials_path: str,
              non_interactive: bool = False, force_renewal: bool = False) -> bool:
        """
        签发单个证书

        Returns:
            bool: certbot是否执行成功
        """
        args = self.build_issue_command(domain, email, credentials_path, non_interactive, force_renewal)
        self.logger.info(f"签发证书: {domain}")

        try:
            result = self.runner.run(args, elevated=True)
        except CommandError as e:
            self.logger.error(f"无法调用certbot签发 {domain}: {str(e)}")
            return False

        if not result.ok:
            self.logger.error(
                f"certbot签发 {domain} 失败（退出码 {result.returncode}）: {result.stderr.strip()}"
            )
            return False

        return True


def write_cloudflare_credentials(credentials_dir: str, dns_zone: str, api_token: str) -> str:
    """
    写入Cloudflare DNS插件凭证文件（权限0600）

    Args:
        credentials_dir: 凭证目录
        dns_zone: DNS区域，用作文件名
        api_token: Cloudflare API令牌

    Returns:
        str: 凭证文件路径
    """
    credentials_dir = os.path.expanduser(credentials_dir)
    os.makedirs(credentials_dir, mode=0o700, exist_ok=True)
    path = os.path.join(credentials_dir, f"{dns_zone}.ini")

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(f"dns_cloudflare_api_token = {api_token}\n")
    # 文件已存在时 os.open 不会修改权限
    os.chmod(path, 0o600)

    return path
