# 命令行入口：解析参数并执行镜像
#
# 子命令：
#   - mirror <url-or-org>：克隆/更新分组或组织下的所有仓库
#   - config：显示当前配置（Token 脱敏）

import argparse
import signal
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .application.execution import run_mirror
from .application.report import format_duration, print_results, report_progress
from .core.preflight import check_git_installed
from .core.process_control import request_shutdown
from .domain.errors import GitNotInstalledError, ProviderError
from .domain.models import MirrorOptions
from .infra.auth import KeyringStatus, load_token
from .infra.logger import log_error, log_info, log_success, log_warning, write_line
from .infra.paths import default_mirror_dir
from .infra.providers import create_provider, parse_target_url, validate_provider_type
from .infra.settings import PROVIDERS, Settings, load_settings, validate_url_security


def validate_non_negative_int(value: str) -> int:
    try:
        num = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be an integer: {value}")
    if num < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0: {value}")
    return num


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="group-mirror",
        description="Clone or update every repository of GitLab groups or GitHub organizations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    mirror_parser = subparsers.add_parser(
        "mirror",
        help="mirror repositories from groups/organizations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s https://github.com/my-org
  %(prog)s https://gitlab.com/my-group
  %(prog)s my-org --provider github
  %(prog)s group1,group2,group3 -p gitlab
  %(prog)s --groups "group1 group2" -p gitlab
  %(prog)s my-org -p github --max-age 24

Skips archived repos and repos not updated within --max-age months.
API tokens come from GITHUB_TOKEN / GITLAB_TOKEN, the system keyring or the
config file. Git operations use your existing git credentials (HTTPS or SSH).
        """,
    )
    mirror_parser.add_argument("target", nargs="?", help="group/org name, comma list or URL")
    mirror_parser.add_argument("-p", "--provider", choices=PROVIDERS, help="gitlab or github")
    mirror_parser.add_argument("-d", "--dir", help="base directory (default: ~/<group>)")
    mirror_parser.add_argument(
        "--parallel", type=int, default=None, metavar="NUM",
        help="parallel clone/pull operations (values below 1 become 1)",
    )
    mirror_parser.add_argument("-v", "--verbose", action="store_true", help="stream git output")
    mirror_parser.add_argument(
        "--max-age", type=validate_non_negative_int, default=None, metavar="MONTHS",
        help="skip repos not updated in this many months (0 = no limit)",
    )
    mirror_parser.add_argument(
        "--skip-preflight", action="store_true", help="skip git credential validation",
    )
    mirror_parser.add_argument(
        "--ssh", action="store_true", help="prefer SSH URLs instead of HTTPS",
    )
    mirror_parser.add_argument(
        "--include-archived", action="store_true", help="also mirror archived repositories",
    )
    mirror_parser.add_argument(
        "--groups", default="", help='space-separated groups, e.g. "group1 group2"',
    )

    subparsers.add_parser("config", help="show the effective configuration")
    return parser


def resolve_groups(args: argparse.Namespace, settings: Settings) -> Tuple[List[str], str, str]:
    """Return ``(groups, provider, base_url)`` from the mirror arguments."""
    if args.groups:
        if not args.provider:
            raise ValueError("--provider required when using --groups flag")
        return args.groups.split(), args.provider, settings.base_url(args.provider)

    target = (args.target or "").strip()
    if not target:
        raise ValueError("either provide a URL/org or use --groups flag")

    if target.startswith(("https://", "http://")):
        parsed = parse_target_url(target)
        provider = args.provider or parsed.provider
        return [parsed.group], provider, parsed.base_url

    if not args.provider:
        raise ValueError(
            "provider required when not using URL. Use --provider github or --provider gitlab"
        )
    if "," in target:
        groups = [group.strip() for group in target.split(",") if group.strip()]
        return groups, args.provider, settings.base_url(args.provider)
    return [target], args.provider, settings.base_url(args.provider)


def build_options(
    args: argparse.Namespace,
    settings: Settings,
    provider: str,
    groups: Sequence[str],
) -> MirrorOptions:
    defaults = settings.mirror
    base_dir = args.dir or defaults.base_dir or str(default_mirror_dir(provider, groups))
    return MirrorOptions(
        base_dir=str(Path(base_dir).expanduser()),
        parallel=args.parallel if args.parallel is not None else defaults.parallel,
        skip_archived=defaults.skip_archived and not args.include_archived,
        max_age_months=args.max_age if args.max_age is not None else defaults.max_age_months,
        verbose=args.verbose,
        skip_preflight=args.skip_preflight,
        use_ssh=args.ssh,
    )


def _handle_interrupt(signum, frame) -> None:
    log_warning("interrupt received, canceling remaining repositories...")
    request_shutdown()


def cmd_mirror(args: argparse.Namespace, settings: Settings) -> int:
    try:
        check_git_installed()
    except GitNotInstalledError as exc:
        log_error(str(exc))
        return 1

    try:
        groups, provider_name, base_url = resolve_groups(args, settings)
        validate_provider_type(provider_name)
    except ValueError as exc:
        log_error(str(exc))
        return 1

    token, source = load_token(provider_name, settings, KeyringStatus())
    try:
        validate_url_security(base_url, token)
    except ValueError as exc:
        log_error(str(exc))
        return 1

    provider = create_provider(provider_name, token, base_url)
    log_info(f"Connecting to {base_url}")
    if token:
        try:
            user = provider.current_user()
        except ProviderError as exc:
            log_error(f"connection failed: {exc}")
            return 1
        log_success(f"Authenticated as {user} (token from {source})")
    else:
        log_warning("No token - public repos only")

    options = build_options(args, settings, provider_name, groups)
    log_info(f"Mirroring {len(groups)} group(s) to {options.base_dir}")

    previous_handler = signal.signal(signal.SIGINT, _handle_interrupt)
    try:
        success, summary, error = run_mirror(provider, groups, options, progress_cb=report_progress)
    finally:
        signal.signal(signal.SIGINT, previous_handler)
    if not success:
        log_error(error)
        return 1

    print_results(summary["results"])
    log_info(f"Duration: {format_duration(summary['duration'])}")
    return 1 if summary["failed"] else 0


def cmd_config(settings: Settings) -> int:
    status = KeyringStatus()
    write_line(f"Configuration file: {settings.config_path}")
    for provider in PROVIDERS:
        token, source = load_token(provider, settings, status)
        write_line()
        write_line(f"{provider}:")
        write_line(f"  URL:   {settings.base_url(provider)}")
        write_line(f"  Token: {'***configured*** (' + source + ')' if token else '(not set)'}")
    write_line()
    write_line("mirror:")
    write_line(f"  Base directory: {settings.mirror.base_dir or '(~/<group>)'}")
    write_line(f"  Parallel:       {settings.mirror.parallel}")
    write_line(f"  Skip archived:  {settings.mirror.skip_archived}")
    write_line(f"  Max age months: {settings.mirror.max_age_months}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    settings = load_settings()
    try:
        if args.command == "config":
            return cmd_config(settings)
        return cmd_mirror(args, settings)
    except KeyboardInterrupt:
        request_shutdown()
        log_error("interrupted, running git processes terminated")
        return 130


if __name__ == "__main__":
    sys.exit(main())
