"""CLI entrypoint for the daily arXiv digest."""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from config import load_crawl_config
from crawler import fetch_window_papers
from mailer import send_daily_digest
from summarizer import summarize_papers

LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Run the arXiv -> summary -> email digest pipeline once")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the digest instead of sending the email",
    )
    parser.add_argument(
        "--skip-summary",
        action="store_true",
        help="Do not call the LLM; send titles and abstracts only",
    )
    return parser.parse_args(argv)


def run(dry_run: bool = False, skip_summary: bool = False) -> int:
    """Run one crawl -> summarize -> notify cycle and return an exit code."""
    try:
        config = load_crawl_config()
        papers = fetch_window_papers(config)
    except Exception as exc:  # any crawl failure means no digest this run
        LOGGER.exception("Crawl failed, no digest will be sent: %s", exc)
        return 1

    LOGGER.info("Fetched %s papers", len(papers))
    if not papers:
        LOGGER.info("No new papers in this window. Workflow ended.")
        return 0

    if skip_summary:
        LOGGER.info("Summaries skipped by request")
    else:
        try:
            summarized = summarize_papers(papers)
            LOGGER.info("Summaries generated: %s/%s", summarized, len(papers))
        except Exception as exc:
            LOGGER.exception("Summary generation failed (non-fatal): %s", exc)

    if dry_run:
        for paper in papers:
            LOGGER.info("[dry-run] Would send: %s %s", paper.paper_id, paper.title)
        return 0

    send_daily_digest(papers)
    LOGGER.info("Workflow completed")
    return 0


def main() -> None:
    """Initialize config and execute the pipeline."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args()
    sys.exit(run(dry_run=args.dry_run, skip_summary=args.skip_summary))


if __name__ == "__main__":
    main()
