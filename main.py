"""
============================================================================
MONITOR CHECK ENGINE - COMMAND LINE
============================================================================
Runs a single check and prints the result as JSON.

    python main.py http https://example.com --status-codes 200-299
    python main.py keyword https://example.com --keyword "Example,Domain"
    python main.py https-cert https://example.com

Exit code is 0 when the target is UP, 1 when it is DOWN.
============================================================================
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from config.constants import Defaults, MonitorType
from config.settings import get_settings
from monitoring.models import CheckResult, MonitorConfig
from monitoring.monitor import CheckEngine


# ============================================================================
# ARGUMENTS
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    monitoring = settings.monitoring

    parser = argparse.ArgumentParser(
        prog="monitor-check",
        description=f"{settings.app_name} v{settings.app_version}: run one monitor check",
    )
    parser.add_argument("type", choices=MonitorType.choices(), help="check to run")
    parser.add_argument("url", help="target URL")
    parser.add_argument("--method", default=Defaults.HTTP_METHOD, help="HTTP method")
    parser.add_argument("--status-codes", default=monitoring.status_codes,
                        help='accepted status codes, e.g. "200-299,301"')
    parser.add_argument("--keyword", default="", help="comma-separated keywords (any match)")
    parser.add_argument("--timeout", type=float, default=monitoring.connect_timeout,
                        help="timeout in seconds")
    parser.add_argument("--retries", type=int, default=Defaults.RETRIES,
                        help="retries after a DOWN result")
    parser.add_argument("--retry-interval", type=float, default=monitoring.retry_interval,
                        help="seconds between retries")
    parser.add_argument("--headers", default="", help="request headers as a JSON object")
    parser.add_argument("--body", default="", help="request body (POST/PUT/PATCH only)")
    parser.add_argument("--max-redirects", type=int, default=monitoring.max_redirects,
                        help="0 disables redirect following")
    parser.add_argument("--notify-cert-expiry", action="store_true",
                        help="check the certificate before an https:// HTTP check")
    parser.add_argument("--monitor-id", default="", help="monitor id for certificate alerts")
    parser.add_argument("--monitor-name", default="", help="monitor name for certificate alerts")
    return parser


def config_from_args(args: argparse.Namespace) -> MonitorConfig:
    return MonitorConfig(
        url=args.url,
        http_method=args.method.upper(),
        status_codes=args.status_codes,
        max_redirects=args.max_redirects,
        request_body=args.body,
        request_headers=args.headers,
        connect_timeout=args.timeout,
        retries=args.retries,
        retry_interval=args.retry_interval,
        keyword=args.keyword,
        notify_cert_expiry=args.notify_cert_expiry,
        monitor_id=args.monitor_id,
        monitor_name=args.monitor_name,
    )


# ============================================================================
# RUN
# ============================================================================

async def run_check(
    monitor_type: str,
    config: MonitorConfig,
    engine: Optional[CheckEngine] = None,
) -> CheckResult:
    engine = engine or CheckEngine()
    try:
        return await engine.check(monitor_type, config)
    finally:
        await engine.aclose()


def main(argv: Optional[List[str]] = None, engine: Optional[CheckEngine] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    result = asyncio.run(run_check(args.type, config, engine))

    print(json.dumps({"type": args.type, "url": config.url, **result.to_dict()}, ensure_ascii=False))
    return 0 if result.is_up else 1


# ============================================================================
# SCRIPT ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
