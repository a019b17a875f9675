"""Daily digest email sent over SMTP."""

from __future__ import annotations

import html
import logging
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from models import Paper

SMTP_TIMEOUT_SECONDS = 30
SUBJECT_TEMPLATE = "[arXiv Daily Digest] {count} new papers today"

LOGGER = logging.getLogger(__name__)


def parse_recipients(raw: str) -> list[str]:
    return [addr.strip() for addr in (raw or "").split(",") if addr.strip()]


def render_digest_html(papers: list[Paper]) -> str:
    """Render the digest body as HTML; every paper field is escaped."""
    parts = [
        "<html><body>",
        "<h2>arXiv Daily Papers</h2>",
        "<p>Here are today's new papers from arXiv:</p>",
        "<hr/>",
    ]
    for paper in papers:
        parts.append(
            f"<h3><a href=\"{html.escape(paper.url)}\">{html.escape(paper.title)}</a></h3>"
        )
        parts.append(f"<p><strong>Authors:</strong> {html.escape(paper.authors)}</p>")
        parts.append(f"<p><strong>Abstract:</strong> {html.escape(paper.abstract)}</p>")
        if paper.ai_summary:
            parts.append(f"<p><strong>AI Summary:</strong> {html.escape(paper.ai_summary)}</p>")
        parts.append("<hr/>")
    parts.append("<p>Generated automatically by the arXiv digest crawler.</p>")
    parts.append("</body></html>")
    return "\n".join(parts)


def render_digest_text(papers: list[Paper]) -> str:
    lines: list[str] = []
    for paper in papers:
        lines.append(paper.title)
        lines.append(paper.url)
        lines.append(f"Authors: {paper.authors}")
        if paper.ai_summary:
            lines.append(f"AI Summary: {paper.ai_summary}")
        lines.append("")
    return "\n".join(lines)


def send_daily_digest(papers: list[Paper]) -> bool:
    """Email the digest. Returns True when sent; failures are logged, never raised."""
    if not papers:
        LOGGER.info("No new papers, skipping digest email")
        return False

    try:
        settings = _smtp_settings()
    except RuntimeError as exc:
        LOGGER.error("Digest email not sent: %s", exc)
        return False

    message = MIMEMultipart("alternative")
    message["Subject"] = SUBJECT_TEMPLATE.format(count=len(papers))
    message["From"] = settings["sender"]
    message["To"] = ", ".join(settings["recipients"])
    message.attach(MIMEText(render_digest_text(papers), "plain", "utf-8"))
    message.attach(MIMEText(render_digest_html(papers), "html", "utf-8"))

    server: smtplib.SMTP | None = None
    try:
        if settings["use_ssl"]:
            server = smtplib.SMTP_SSL(settings["host"], settings["port"], timeout=SMTP_TIMEOUT_SECONDS)
        else:
            server = smtplib.SMTP(settings["host"], settings["port"], timeout=SMTP_TIMEOUT_SECONDS)
            server.starttls()
        if settings["user"]:
            server.login(settings["user"], settings["password"])
        server.sendmail(settings["sender"], settings["recipients"], message.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        LOGGER.error("Failed to send digest email via %s:%s: %s", settings["host"], settings["port"], exc)
        return False
    finally:
        if server is not None:
            try:
                server.quit()
            except (smtplib.SMTPException, OSError):
                LOGGER.debug("SMTP quit failed", exc_info=True)

    LOGGER.info(
        "Digest email sent to %s recipients (%s)",
        len(settings["recipients"]),
        ", ".join(settings["recipients"]),
    )
    return True


def _smtp_settings() -> dict:
    host = os.getenv("SMTP_HOST", "").strip()
    sender = os.getenv("MAIL_SENDER", "").strip()
    recipients = parse_recipients(os.getenv("MAIL_RECIPIENTS", ""))
    if not host:
        raise RuntimeError("SMTP_HOST environment variable is required")
    if not sender:
        raise RuntimeError("MAIL_SENDER environment variable is required")
    if not recipients:
        raise RuntimeError("MAIL_RECIPIENTS environment variable is required")

    try:
        port = int(os.getenv("SMTP_PORT", "465"))
    except ValueError as exc:
        raise RuntimeError("SMTP_PORT must be an integer") from exc

    return {
        "host": host,
        "port": port,
        "user": os.getenv("SMTP_USER", "").strip(),
        "password": os.getenv("SMTP_PASSWORD", ""),
        "sender": sender,
        "recipients": recipients,
        "use_ssl": os.getenv("SMTP_USE_SSL", "true").strip().lower() in {"1", "true", "yes"},
    }
