#!/usr/bin/env python3
"""Check that the knowledge API backing the graph view is reachable."""
from __future__ import annotations

import argparse
import logging
import sys

from graphview.config import ConfigError, load_config
from graphview.utils.api_health import check_api_health


def parse_args() -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "base_url",
        nargs="?",
        default=None,
        help="Knowledge API base URL (default: api.base_url from config.yaml)",
    )
    parser.add_argument("--user-id", default=None, help="Value sent in the X-User-ID header")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: api.timeout_seconds from config.yaml)",
    )
    return parser.parse_args()


def main() -> int:
    """Run the health check and print a one-line verdict.

    Returns:
        int: ``0`` when the API is running, ``1`` otherwise.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    args = parse_args()

    base_url, user_id, timeout = args.base_url, args.user_id, args.timeout
    if base_url is None or user_id is None or timeout is None:
        try:
            api_config = load_config().api
        except ConfigError as exc:
            print(f"Unable to load configuration: {exc}", file=sys.stderr)
            return 1
        base_url = base_url or api_config.base_url
        user_id = user_id or api_config.user_id
        timeout = timeout if timeout is not None else api_config.timeout_seconds

    result = check_api_health(base_url, user_id=user_id, timeout=timeout)

    if result.ok:
        latency = f"{result.latency_ms:.2f}" if result.latency_ms is not None else "unknown"
        backends = ", ".join(f"{name}={state}" for name, state in sorted(result.backends.items())) or "<none>"
        print("Knowledge API is running", f"latency_ms={latency}", f"backends={backends}")
        if result.degraded_backends:
            print("Degraded backends:", ", ".join(result.degraded_backends), file=sys.stderr)
        return 0

    print("Knowledge API health check failed:", result.detail, file=sys.stderr)
    if result.status_code is not None:
        print(f"Status code: {result.status_code}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
