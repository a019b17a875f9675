"""LLM-generated paper summaries (OpenAI by default, Claude optional)."""

from __future__ import annotations

import logging
import os

import anthropic
from openai import OpenAI

from feed_client import Pause
from models import Paper

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.2"))
CLAUDE_MAX_TOKENS = 1024
DEFAULT_SUMMARY_DELAY_SECONDS = 4.0

DEFAULT_PROMPT = """You are a research assistant writing a daily paper digest.
Summarize the following arXiv paper in 3-4 plain sentences: the problem,
the proposed method, and the main result. Do not use markdown."""

LOGGER = logging.getLogger(__name__)


class SummaryError(RuntimeError):
    """The summarization provider failed to produce a response."""


def summarize_papers(papers: list[Paper], pause: Pause | None = None) -> int:
    """Write ``ai_summary`` on each paper in place and return how many got one.

    Empty summaries leave the paper untouched. A ``SummaryError`` stops the
    loop; summaries written before it are kept.
    """
    if pause is None:
        delay = float(os.getenv("SUMMARY_DELAY_SECONDS", str(DEFAULT_SUMMARY_DELAY_SECONDS)))
        pause = Pause(delay)

    summarized = 0
    for paper in papers:
        pause.wait()
        summary = generate_summary(_paper_text(paper)).strip()
        if not summary:
            LOGGER.info("Empty summary for paper_id=%s, skipping", paper.paper_id)
            continue
        paper.ai_summary = summary
        summarized += 1
        LOGGER.info("Summarized paper_id=%s", paper.paper_id)

    return summarized


def generate_summary(text: str) -> str:
    """Summarize ``text`` with the provider named by SUMMARY_PROVIDER."""
    provider = os.getenv("SUMMARY_PROVIDER", "openai").strip().lower()
    prompt = os.getenv("SUMMARY_PROMPT", DEFAULT_PROMPT)

    if provider == "openai":
        return _openai_summary(prompt, text)
    if provider == "anthropic":
        return _claude_summary(prompt, text)
    raise RuntimeError(f"SUMMARY_PROVIDER must be 'openai' or 'anthropic', got {provider!r}")


def _openai_summary(prompt: str, text: str) -> str:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is required")

    client = OpenAI(api_key=api_key)
    try:
        response = client.chat.completions.create(
            model=OPENAI_MODEL,
            temperature=OPENAI_TEMPERATURE,
            messages=[
                {"role": "system", "content": prompt},
                {"role": "user", "content": text},
            ],
        )
    except Exception as exc:
        raise SummaryError(f"OpenAI summary request failed: {exc}") from exc

    return response.choices[0].message.content or ""


def _claude_summary(prompt: str, text: str) -> str:
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError("ANTHROPIC_API_KEY environment variable is required")

    claude_model = os.getenv("CLAUDE_MODEL", "claude-sonnet-4-5")
    client = anthropic.Anthropic(api_key=api_key)

    LOGGER.debug("Calling Claude model=%s max_tokens=%s", claude_model, CLAUDE_MAX_TOKENS)
    try:
        response = client.messages.create(
            model=claude_model,
            max_tokens=CLAUDE_MAX_TOKENS,
            system=prompt,
            messages=[{"role": "user", "content": text}],
        )
    except Exception as exc:
        raise SummaryError(f"Claude summary request failed: {exc}") from exc

    return "".join(block.text for block in response.content if getattr(block, "type", "") == "text")


def _paper_text(paper: Paper) -> str:
    return (
        f"Title: {paper.title}\n"
        f"Authors: {paper.authors or 'Not available.'}\n"
        f"Abstract: {paper.abstract or 'Not available.'}\n"
    )
