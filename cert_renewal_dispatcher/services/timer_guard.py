"""
自动续期定时器冲突处理
"""
import logging
from typing import Optional

from ..interfaces import TimerControlInterface
from .command_runner import CommandRunner
from .error_handler import CommandError, TimerConflict


class SystemdTimerControl(TimerControlInterface):
    """通过systemctl控制Snap打包的certbot续期定时器"""

    def __init__(self, timer_name: str = "snap.certbot.renew.timer",
                 service_name: Optional[str] = "snap.certbot.renew.service",
                 runner: Optional[CommandRunner] = None):
        self.timer_name = timer_name
        self.service_name = service_name
        self.runner = runner or CommandRunner()
        self.logger = logging.getLogger(__name__)

    def exists(self) -> bool:
        """定时器单元文件是否存在"""
        try:
            result = self.runner.run(["systemctl", "list-unit-files", self.timer_name])
        except CommandError as e:
            self.logger.warning(f"无法查询systemd单元: {str(e)}")
            return False
        return self.timer_name in result.stdout

    def is_active(self) -> bool:
        try:
            result = self.runner.run(["systemctl", "is-active", self.timer_name])
        except CommandError as e:
            self.logger.warning(f"无法查询定时器状态: {str(e)}")
            return False
        return result.stdout.strip() == "active"

    def disable(self) -> bool:
        """
        停止并禁用定时器，同时尽量停止并禁用对应的服务

        Returns:
            bool: 定时器是否成功停止并禁用
        """
        if not self._stop_and_disable(self.timer_name):
            return False

        if self.service_name and self._stop_and_disable(self.service_name):
            self.logger.info(f"同时禁用了关联服务: {self.service_name}")

        return True

    def _stop_and_disable(self, unit: str) -> bool:
        try:
            for action in ("stop", "disable"):
                result = self.runner.run(["systemctl", action, unit], elevated=True)
                if not result.ok:
                    self.logger.debug(f"systemctl {action} {unit} 失败: {result.stderr.strip()}")
                    return False
        except CommandError as e:
            self.logger.debug(f"systemctl 调用失败: {str(e)}")
            return False
        return True


def ensure_no_competing_timer(control: TimerControlInterface) -> bool:
    """
    运行前确保没有活动的自动续期定时器（幂等）

    Args:
        control: 定时器控制器

    Returns:
        bool: 是否执行了禁用操作

    Raises:
        TimerConflict: 定时器处于活动状态但无法禁用
    """
    logger = logging.getLogger(__name__)
    logger.info("检查Snap自动续期定时器...")

    if not control.exists():
        logger.info("未发现Snap自动续期定时器")
        return False

    if not control.is_active():
        logger.info("Snap自动续期定时器已处于非活动状态")
        return False

    logger.warning("Snap自动续期定时器处于活动状态，正在禁用以避免冲突...")
    if not control.disable():
        raise TimerConflict("无法停止并禁用Snap自动续期定时器")

    logger.info("已停止并禁用Snap自动续期定时器")
    return True
