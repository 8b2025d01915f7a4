"""Process bootstrap for the Pulse Metrics service.

``serve`` starts the HTTP API under uvicorn. ``digest`` computes one
dashboard and prints it as markdown, or posts it to a Slack channel. Keeping
this here (instead of in ``pulse_metrics.api``) lets the API module be
imported by tests without configuring logging or reading CLI arguments.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from pulse_metrics import config
from pulse_metrics.aggregator import MetricsAggregator
from pulse_metrics.exceptions import PulseMetricsError
from pulse_metrics.models import Role
from pulse_metrics.reporting.render import post_digest_to_slack, render_digest
from pulse_metrics.upstream import UpstreamClient

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=config.LOG_LEVEL,
)
logger = logging.getLogger("pulse_metrics")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pulse-metrics")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=config.HOST)
    serve.add_argument("--port", type=int, default=config.PORT)

    digest = sub.add_parser("digest", help="print or post a dashboard digest")
    digest.add_argument("--role", required=True)
    digest.add_argument("--company-id", type=int, required=True)
    digest.add_argument("--user-id", type=int, default=None)
    digest.add_argument("--channel", help="Slack channel to post to")
    digest.add_argument("--json", action="store_true", help="print the raw payload")
    return parser


def serve(host: str, port: int) -> None:  # pragma: no cover – manual run path
    import uvicorn

    logger.info("Starting API on %s:%d", host, port)
    uvicorn.run("pulse_metrics.api:app", host=host, port=port)


def digest(args: argparse.Namespace) -> int:
    role = Role.parse(args.role)
    settings = config.UpstreamSettings.from_env()
    try:
        with UpstreamClient.from_settings(settings) as client:
            aggregator = MetricsAggregator(
                client,
                enable_fallback=config.ENABLE_MOCK_DATA,
                max_workers=config.MAX_IN_FLIGHT,
            )
            payload = aggregator.compute_metrics(role, args.company_id, args.user_id)
    except PulseMetricsError as exc:
        logger.error("Failed to compute %s dashboard: %s", role.value, exc)
        return 1

    if not args.channel:
        print(json.dumps(payload, indent=2) if args.json else render_digest(payload))
        return 0

    if not config.SLACK_BOT_TOKEN:
        logger.error("Environment variable SLACK_BOT_TOKEN is required to post digests.")
        return 1
    try:
        post_digest_to_slack(
            payload=payload,
            client=WebClient(token=config.SLACK_BOT_TOKEN),
            channel=args.channel,
        )
    except SlackApiError as exc:
        logger.error("Failed to post digest to %s: %s", args.channel, exc.response.get("error"))
        return 1
    logger.info("Digest posted to %s", args.channel)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "serve":
        serve(args.host, args.port)
        return 0
    return digest(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
