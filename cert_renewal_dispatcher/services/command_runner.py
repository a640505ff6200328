"""
外部命令执行服务
"""
import shlex
import subprocess
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .error_handler import CommandError


@dataclass
class CommandResult:
    """外部命令执行结果"""
    command: List[str]
    returncode: int
    stdout: Union[str, bytes]
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """外部命令执行器"""

    def __init__(self, sudo_command: str = "sudo"):
        """
        初始化命令执行器

        Args:
            sudo_command: 提升权限使用的命令前缀，例如 "sudo" 或 "sudo -n"
        """
        self.sudo_prefix = shlex.split(sudo_command) if sudo_command else []
        self.logger = logging.getLogger(__name__)

    def build_command(self, args: List[str], elevated: bool = False) -> List[str]:
        """
        构建完整命令

        Args:
            args: 命令参数
            elevated: 是否提升权限

        Returns:
            List[str]: 完整命令
        """
        if elevated:
            return self.sudo_prefix + list(args)
        return list(args)

    def run(self, args: List[str], elevated: bool = False, cwd: Optional[str] = None,
            check: bool = False, text: bool = True) -> CommandResult:
        """
        执行外部命令并等待其结束（不设超时）

        Args:
            args: 命令参数
            elevated: 是否提升权限
            cwd: 工作目录
            check: 非零退出码时是否抛出异常
            text: 为True时stdout按UTF-8解码（无效字节被替换），否则保留原始字节

        Returns:
            CommandResult: 执行结果

        Raises:
            CommandError: 命令不存在，或check为True且退出码非零
        """
        command = self.build_command(args, elevated)
        self.logger.debug(f"执行命令: {shlex.join(command)}")

        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE
            )
        except (FileNotFoundError, PermissionError) as e:
            raise CommandError(f"无法执行命令 {command[0]}: {str(e)}", command=command) from e

        stdout = completed.stdout or b""
        if text:
            stdout = stdout.decode("utf-8", errors="replace")

        result = CommandResult(
            command=command,
            returncode=completed.returncode,
            stdout=stdout,
            stderr=(completed.stderr or b"").decode("utf-8", errors="replace")
        )

        if not result.ok:
            self.logger.debug(
                f"命令退出码 {result.returncode}: {shlex.join(command)}; stderr: {result.stderr.strip()}"
            )
            if check:
                raise CommandError(
                    f"命令执行失败（退出码 {result.returncode}）: {shlex.join(command)}",
                    command=command,
                    returncode=result.returncode,
                    stderr=result.stderr
                )

        return result
