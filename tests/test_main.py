"""Tests for the one-shot pipeline run (main.run)."""

from __future__ import annotations

from unittest.mock import patch

import main
from feed_client import FeedRequestError
from models import Paper
from summarizer import SummaryError


def _paper(paper_id: str) -> Paper:
    return Paper(
        paper_id=paper_id,
        title=f"Paper {paper_id}",
        authors="Grace Hopper",
        abstract="abstract",
        url=f"https://arxiv.org/abs/{paper_id}",
    )


def test_failed_crawl_sends_nothing() -> None:
    with patch("main.load_crawl_config"), \
         patch("main.fetch_window_papers", side_effect=FeedRequestError("http://feed.test", 3)), \
         patch("main.summarize_papers") as mock_summarize, \
         patch("main.send_daily_digest") as mock_send:
        exit_code = main.run()

    assert exit_code == 1
    mock_summarize.assert_not_called()
    mock_send.assert_not_called()


def test_empty_crawl_skips_downstream_steps() -> None:
    with patch("main.load_crawl_config"), \
         patch("main.fetch_window_papers", return_value=[]), \
         patch("main.summarize_papers") as mock_summarize, \
         patch("main.send_daily_digest") as mock_send:
        exit_code = main.run()

    assert exit_code == 0
    mock_summarize.assert_not_called()
    mock_send.assert_not_called()


def test_summary_failure_still_sends_digest() -> None:
    papers = [_paper("2405.00001")]

    with patch("main.load_crawl_config"), \
         patch("main.fetch_window_papers", return_value=papers), \
         patch("main.summarize_papers", side_effect=SummaryError("quota")), \
         patch("main.send_daily_digest") as mock_send:
        exit_code = main.run()

    assert exit_code == 0
    mock_send.assert_called_once_with(papers)


def test_skip_summary_and_dry_run() -> None:
    with patch("main.load_crawl_config"), \
         patch("main.fetch_window_papers", return_value=[_paper("2405.00001")]), \
         patch("main.summarize_papers") as mock_summarize, \
         patch("main.send_daily_digest") as mock_send:
        exit_code = main.run(dry_run=True, skip_summary=True)

    assert exit_code == 0
    mock_summarize.assert_not_called()
    mock_send.assert_not_called()


def test_parse_args_flags() -> None:
    args = main.parse_args(["--dry-run", "--skip-summary"])
    assert args.dry_run is True
    assert args.skip_summary is True
