"""
域名列表管理服务
"""
import re
import logging
from typing import Iterable, List, Optional

from .error_handler import ConfigurationError


class DomainConfigManager:
    """签发证书用的域名列表管理器"""

    def __init__(self):
        """初始化域名列表管理器"""
        self.logger = logging.getLogger(__name__)

        # 域名格式验证正则表达式（允许通配符前缀）
        self.domain_pattern = re.compile(
            r'^(?:\*\.)?(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$'
        )

    def load_domain_list(self, path: str) -> List[str]:
        """
        读取域名列表文件（每行一个域名，跳过空行和#注释）

        Args:
            path: 列表文件路径

        Returns:
            List[str]: 原始顺序的域名列表

        Raises:
            ConfigurationError: 文件不存在或不可读
        """
        try:
            with open(path, encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise ConfigurationError(f"无法读取域名列表文件 {path}: {str(e)}") from e

        domains = []
        for line in lines:
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            domains.append(line)

        self.logger.info(f"从 {path} 读取了 {len(domains)} 个域名")
        return domains

    def validate_domain(self, domain: str) -> bool:
        """
        验证域名格式

        Args:
            domain: 要验证的域名

        Returns:
            bool: 域名是否有效
        """
        if not domain or not isinstance(domain, str):
            return False

        if len(domain) > 253:
            return False

        return bool(self.domain_pattern.match(domain))

    def collect_domains(self, list_file: Optional[str] = None, domains: Iterable[str] = (),
                        default_domain: str = "") -> List[str]:
        """
        汇总列表文件与命令行中的域名，去重并保持顺序

        Args:
            list_file: 域名列表文件
            domains: 命令行指定的域名
            default_domain: 以上均为空时使用的配置文件域名

        Returns:
            List[str]: 有效域名列表

        Raises:
            ConfigurationError: 没有任何有效域名
        """
        raw_domains = []
        if list_file:
            raw_domains.extend(self.load_domain_list(list_file))
        raw_domains.extend(d.strip() for d in domains if d and d.strip())

        if not raw_domains and default_domain:
            raw_domains.append(default_domain.strip())

        valid_domains = []
        for domain in raw_domains:
            cleaned = domain.lower()
            if not self.validate_domain(cleaned):
                self.logger.warning(f"跳过无效域名: {domain}")
                continue
            if cleaned not in valid_domains:
                valid_domains.append(cleaned)

        if not valid_domains:
            raise ConfigurationError("没有找到有效的域名")

        return valid_domains
