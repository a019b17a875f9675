from zoneinfo import ZoneInfo

import pytest

from config import ATOM_BASE_URL, OAI_BASE_URL, load_crawl_config, parse_hours


def test_defaults() -> None:
    config = load_crawl_config({})

    assert config.protocol == "oai"
    assert config.base_url == OAI_BASE_URL
    assert config.categories == ("cs.AI",)
    assert config.schedule_tz == ZoneInfo("Asia/Shanghai")
    assert config.feed_tz == ZoneInfo("UTC")
    assert config.anchor_hours == (10,)
    assert config.page_size == 100


def test_values_are_read_from_mapping() -> None:
    config = load_crawl_config({
        "FEED_PROTOCOL": "ATOM",
        "ARXIV_CATEGORIES": "cs.LG, cs.CL",
        "SCHEDULE_TIMEZONE": "Europe/Berlin",
        "ANCHOR_HOURS": "22,10",
        "PAGE_SIZE": "25",
        "RETRY_DELAY_SECONDS": "0",
        "FEED_USER_AGENT": "digest-test/0.1",
    })

    assert config.protocol == "atom"
    assert config.base_url == ATOM_BASE_URL
    assert config.categories == ("cs.LG", "cs.CL")
    assert config.schedule_tz == ZoneInfo("Europe/Berlin")
    assert config.anchor_hours == (10, 22)
    assert config.page_size == 25
    assert config.retry_delay_seconds == 0
    assert config.user_agent == "digest-test/0.1"


def test_explicit_base_url_wins() -> None:
    config = load_crawl_config({"FEED_BASE_URL": "http://localhost:8080/oai"})
    assert config.base_url == "http://localhost:8080/oai"


@pytest.mark.parametrize("env, name", [
    ({"FEED_PROTOCOL": "html"}, "FEED_PROTOCOL"),
    ({"ARXIV_CATEGORIES": " , "}, "ARXIV_CATEGORIES"),
    ({"SCHEDULE_TIMEZONE": "Mars/Olympus"}, "SCHEDULE_TIMEZONE"),
    ({"PAGE_SIZE": "0"}, "PAGE_SIZE"),
    ({"PAGE_SIZE": "many"}, "PAGE_SIZE"),
    ({"REQUEST_TIMEOUT_SECONDS": "0"}, "REQUEST_TIMEOUT_SECONDS"),
    ({"PAGE_DELAY_SECONDS": "-1"}, "PAGE_DELAY_SECONDS"),
])
def test_invalid_values_name_the_variable(env: dict[str, str], name: str) -> None:
    with pytest.raises(RuntimeError, match=name):
        load_crawl_config(env)


def test_parse_hours() -> None:
    assert parse_hours("22, 10,10") == (10, 22)


@pytest.mark.parametrize("raw", ["", "24", "ten", "-1"])
def test_parse_hours_rejects_bad_values(raw: str) -> None:
    with pytest.raises(RuntimeError, match="ANCHOR_HOURS"):
        parse_hours(raw)
