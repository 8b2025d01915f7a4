"""Render dashboard payloads as Slack-friendly markdown digests."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Slack markdown, not HTML: autoescape would mangle apostrophes etc.
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)

# Longer digests are uploaded as a file instead of a chat message
MAX_MESSAGE_LEN = 2800


def digest_title(payload: Mapping[str, Any]) -> str:
    role = payload.get("role") or "dashboard"
    company_id = payload.get("company_id")
    if company_id is not None:
        return f"{role} (company {company_id})"
    return str(role)


def render_digest(payload: Mapping[str, Any]) -> str:
    """Render a markdown digest from a dashboard or flat-metrics *payload*."""

    template = _env.get_template("digest.md.j2")
    return template.render(title=digest_title(payload), **payload)


def post_digest_to_slack(*, payload: Mapping[str, Any], client, channel: str) -> None:
    """Send the digest for *payload* to Slack *channel* using *client* (WebClient)."""

    title = digest_title(payload)
    parent_resp = client.chat_postMessage(
        channel=channel,
        text=f"*Pulse dashboard for {title}*",
    )
    parent_ts = parent_resp["ts"]

    digest = render_digest(payload)
    logger.debug("Digest generated for %s channel=%s len=%d", title, channel, len(digest))

    if len(digest) < MAX_MESSAGE_LEN:
        client.chat_postMessage(channel=channel, text=digest, thread_ts=parent_ts)
    else:
        client.files_upload_v2(
            channel=channel,
            title=f"Pulse dashboard {title}",
            content=digest,
            filename="pulse_dashboard.md",
            thread_ts=parent_ts,
        )
