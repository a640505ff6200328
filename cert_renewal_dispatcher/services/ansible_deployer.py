"""
Ansible部署服务
"""
import os
import logging
from typing import Optional

from ..interfaces import DeployerInterface
from .command_runner import CommandRunner
from .error_handler import CommandError, DeployFailed


class AnsibleDeployer(DeployerInterface):
    """通过ansible-playbook将证书部署到单个主机"""

    def __init__(self, playbook: str = "deploy_webmin_cert.yml",
                 inventory_file: str = "~/ansible_home/inventory/default_inventory",
                 playbook_dir: Optional[str] = "~/ansible_home/playbooks",
                 runner: Optional[CommandRunner] = None,
                 ansible_playbook_command: str = "ansible-playbook"):
        """
        初始化Ansible部署器

        Args:
            playbook: playbook文件名
            inventory_file: inventory文件路径
            playbook_dir: playbook所在目录，存在时作为工作目录
            runner: 命令执行器
            ansible_playbook_command: ansible-playbook可执行文件
        """
        self.playbook = playbook
        self.inventory_file = os.path.expanduser(inventory_file)
        self.playbook_dir = os.path.expanduser(playbook_dir) if playbook_dir else None
        self.runner = runner or CommandRunner()
        self.ansible_playbook_command = ansible_playbook_command
        self.logger = logging.getLogger(__name__)

    def build_command(self, domain: str) -> list:
        return [
            self.ansible_playbook_command,
            "-i", self.inventory_file,
            "-l", domain,
            self.playbook,
            "-v",
        ]

    def deploy(self, domain: str) -> None:
        """
        将证书部署到与域名同名的主机（ansible使用become，不需要sudo）

        Args:
            domain: 域名，同时作为 --limit 主机模式

        Raises:
            DeployFailed: playbook执行失败
        """
        cwd = None
        if self.playbook_dir and os.path.isdir(self.playbook_dir):
            cwd = self.playbook_dir
        else:
            self.logger.debug(f"playbook目录不存在，使用当前目录: {self.playbook_dir}")

        self.logger.info(f"通过Ansible部署证书到: {domain}")

        try:
            result = self.runner.run(self.build_command(domain), cwd=cwd)
        except CommandError as e:
            raise DeployFailed(f"无法调用ansible-playbook部署 {domain}: {str(e)}") from e

        if not result.ok:
            raise DeployFailed(
                f"ansible-playbook部署 {domain} 失败（退出码 {result.returncode}）: "
                f"{(result.stderr or result.stdout).strip()[-500:]}"
            )
