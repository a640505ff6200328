"""
命令行入口
"""
import argparse
import os
import sys
from typing import List, Optional

from .dispatcher import RenewalDispatcher
from .generator import CertificateGenerator
from .settings import load_settings
from .services.config_validator import ConfigValidator
from .services.domain_config import DomainConfigManager
from .services.logger import LoggerService
from .services.error_handler import (
    ConfigurationError,
    StoreUnavailable,
    TimerConflict,
)

EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--log-level", help="日志级别 (DEBUG/INFO/WARNING/ERROR)")
    common.add_argument("--allow-root", action="store_true",
                        help="允许以root身份运行（默认拒绝，需要时通过sudo提权）")

    parser = argparse.ArgumentParser(
        prog="cert-renewal",
        description="Let's Encrypt证书签发、续期与Ansible部署"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    renew = subparsers.add_parser("renew", parents=[common],
                                  help="检查证书有效期，续期并部署即将过期的证书")
    renew.add_argument("-c", "--config", help="配置文件路径 (key=value)")
    renew.add_argument("--threshold", type=int, help="续期阈值天数")
    renew.add_argument("--live-dir", help="证书存储目录")
    renew.add_argument("-f", "--force", action="store_true", help="对所有证书强制续期")
    renew.add_argument("--skip-timer-check", action="store_true",
                       help="不检查Snap自动续期定时器")

    issue = subparsers.add_parser("issue", parents=[common],
                                  help="通过Cloudflare DNS-01批量签发证书")
    issue.add_argument("-c", "--config", required=True, help="配置文件路径 (key=value)")
    issue.add_argument("-l", "--list", dest="domain_list", help="域名列表文件")
    issue.add_argument("-d", "--domain", dest="domains", action="append", default=[],
                       help="域名（可重复）")
    issue.add_argument("-n", "--non-interactive", action="store_true", help="非交互模式")
    issue.add_argument("-f", "--force-renewal", action="store_true", help="强制重新签发")

    return parser


def run_renew(args: argparse.Namespace) -> int:
    settings = load_settings(args.config, overrides={
        'renewal_threshold_days': args.threshold,
        'live_dir': args.live_dir,
        'log_level': args.log_level,
    })

    validator = ConfigValidator(settings)
    result = validator.validate_for_renewal()
    if not result['is_valid']:
        raise ConfigurationError(validator.get_configuration_summary(result))

    dispatcher = RenewalDispatcher.from_settings(
        settings, force=args.force, check_timer=not args.skip_timer_check
    )
    report = dispatcher.execute()
    return report.exit_code


def run_issue(args: argparse.Namespace) -> int:
    settings = load_settings(args.config, overrides={'log_level': args.log_level})
    domains = DomainConfigManager().collect_domains(
        list_file=args.domain_list,
        domains=args.domains,
        default_domain=settings.domain
    )

    generator = CertificateGenerator(settings)
    report = generator.execute(
        domains,
        non_interactive=args.non_interactive,
        force_renewal=args.force_renewal
    )
    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """
    命令行主函数

    Returns:
        int: 0 全部成功，1 存在失败的域名，2 配置错误或致命错误
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = LoggerService(log_level=args.log_level).logger

    if os.geteuid() == 0 and not args.allow_root:
        logger.error("不应以root身份运行，请使用具有sudo权限的普通用户（或指定 --allow-root）")
        return EXIT_FATAL

    try:
        if args.command == "renew":
            return run_renew(args)
        return run_issue(args)

    except ConfigurationError as e:
        logger.error(f"配置错误: {str(e)}")
        return EXIT_FATAL

    except (StoreUnavailable, TimerConflict) as e:
        logger.error(f"运行中止: {str(e)}")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
