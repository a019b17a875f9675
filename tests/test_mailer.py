import smtplib
from email import message_from_string
from unittest.mock import MagicMock, patch

from mailer import parse_recipients, render_digest_html, send_daily_digest
from models import Paper

SMTP_ENV = {
    "SMTP_HOST": "smtp.example.com",
    "SMTP_PORT": "465",
    "SMTP_USER": "bot@example.com",
    "SMTP_PASSWORD": "secret",
    "MAIL_SENDER": "bot@example.com",
    "MAIL_RECIPIENTS": "a@example.com, ,b@example.com",
}


def _paper(paper_id: str, summary: str | None = None) -> Paper:
    return Paper(
        paper_id=paper_id,
        title=f"Paper <{paper_id}>",
        authors="Grace Hopper & Alan Turing",
        abstract="Abstract.",
        url=f"https://arxiv.org/abs/{paper_id}",
        ai_summary=summary,
    )


def test_parse_recipients() -> None:
    assert parse_recipients(" a@example.com, ,b@example.com,") == ["a@example.com", "b@example.com"]


def test_render_digest_html_escapes_and_includes_summary() -> None:
    body = render_digest_html([_paper("2405.00001", summary="Short."), _paper("2405.00002")])

    assert "Paper &lt;2405.00001&gt;" in body
    assert "Grace Hopper &amp; Alan Turing" in body
    assert 'href="https://arxiv.org/abs/2405.00001"' in body
    assert body.count("AI Summary") == 1


def test_empty_batch_is_a_silent_no_op() -> None:
    with patch("mailer.smtplib.SMTP_SSL") as mock_smtp:
        assert send_daily_digest([]) is False
    mock_smtp.assert_not_called()


def test_send_daily_digest_over_ssl() -> None:
    server = MagicMock()

    with patch.dict("os.environ", SMTP_ENV), \
         patch("mailer.smtplib.SMTP_SSL", return_value=server) as mock_smtp:
        assert send_daily_digest([_paper("2405.00001"), _paper("2405.00002")]) is True

    mock_smtp.assert_called_once_with("smtp.example.com", 465, timeout=30)
    server.login.assert_called_once_with("bot@example.com", "secret")
    sender, recipients, raw = server.sendmail.call_args.args
    assert sender == "bot@example.com"
    assert recipients == ["a@example.com", "b@example.com"]
    assert message_from_string(raw)["Subject"] == "[arXiv Daily Digest] 2 new papers today"
    server.quit.assert_called_once()


def test_starttls_when_ssl_disabled() -> None:
    server = MagicMock()
    env = {**SMTP_ENV, "SMTP_PORT": "587", "SMTP_USE_SSL": "false"}

    with patch.dict("os.environ", env), \
         patch("mailer.smtplib.SMTP", return_value=server) as mock_smtp:
        assert send_daily_digest([_paper("2405.00001")]) is True

    mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=30)
    server.starttls.assert_called_once()


def test_smtp_failure_is_logged_not_raised() -> None:
    server = MagicMock()
    server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({})

    with patch.dict("os.environ", SMTP_ENV), \
         patch("mailer.smtplib.SMTP_SSL", return_value=server):
        assert send_daily_digest([_paper("2405.00001")]) is False

    server.quit.assert_called_once()


def test_missing_configuration_is_logged_not_raised() -> None:
    with patch.dict("os.environ", {}, clear=True):
        assert send_daily_digest([_paper("2405.00001")]) is False
