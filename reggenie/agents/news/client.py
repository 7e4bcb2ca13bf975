"""Regulatory news feed: grounded web search, verified-URL filtering and caching."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from reggenie.agents.llm.client import generate_structured, search_web
from reggenie.agents.news.prompts import (
    ARCHIVE_SEARCH_PROMPT,
    PARSE_SYSTEM_PROMPT,
    RECENT_SEARCH_PROMPT,
    build_news_parse_prompt,
)
from reggenie.config.settings import settings
from reggenie.database.local_store import LocalStorage, get_local_storage
from reggenie.models.records import current_timestamp
from reggenie.models.regulation import NewsBatch, NewsItem

logger = logging.getLogger(__name__)

NEWS_DATA_KEY = "regNewsData"
NEWS_TIME_KEY = "regNewsTime"
ARCHIVE_DATA_KEY = "regArchiveData"

DISPLAY_WINDOW_DAYS = 7


def _fetch_news(search_prompt: str, archive: bool) -> List[NewsItem]:
    grounded = search_web(search_prompt)
    verified = {source["uri"] for source in grounded.sources}

    batch = generate_structured(
        build_news_parse_prompt(grounded.text, grounded.sources, archive=archive),
        NewsBatch,
        name="regulatory_news",
        system=PARSE_SYSTEM_PROMPT,
    )

    return filter_verified(batch.items, verified)


def filter_verified(items: List[NewsItem], verified_urls: set) -> List[NewsItem]:
    """Keep items with a title, summary and a URL that was actually cited."""
    kept = []
    for item in items:
        url = item.url.strip()
        if not item.title or not item.summary or not url:
            continue
        if url not in verified_urls:
            logger.debug(f"Dropping news item with unverified URL: {url}")
            continue
        kept.append(item)
    return kept


def sort_by_date(items: List[NewsItem]) -> List[NewsItem]:
    return sorted(items, key=lambda i: i.date, reverse=True)


def get_regulatory_news() -> List[NewsItem]:
    try:
        items = _fetch_news(RECENT_SEARCH_PROMPT, archive=False)
    except Exception as e:
        logger.error(f"Error fetching news: {e}")
        return []

    logger.info(f"Fetched {len(items)} verified news items")
    return items


def get_archived_regulatory_news() -> List[NewsItem]:
    try:
        items = _fetch_news(ARCHIVE_SEARCH_PROMPT, archive=True)
    except Exception as e:
        logger.error(f"Error fetching archived news: {e}")
        return []

    logger.info(f"Fetched {len(items)} archived news items")
    return items


def _parse_date(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d")
    except (TypeError, ValueError):
        return None


def displayed_news(items: List[NewsItem], now: Optional[datetime] = None) -> List[NewsItem]:
    """Items dated within the last week; undated items are not shown."""
    cutoff = (now or datetime.now()) - timedelta(days=DISPLAY_WINDOW_DAYS)
    shown = []
    for item in items:
        published = _parse_date(item.date)
        if published is not None and published >= cutoff:
            shown.append(item)
    return shown


def older_news(items: List[NewsItem], now: Optional[datetime] = None) -> List[NewsItem]:
    cutoff = (now or datetime.now()) - timedelta(days=DISPLAY_WINDOW_DAYS)
    older = []
    for item in items:
        published = _parse_date(item.date)
        if published is not None and published < cutoff:
            older.append(item)
    return older


def get_cached_news(
    storage: Optional[LocalStorage] = None,
    force_refresh: bool = False,
) -> List[NewsItem]:
    """Recent news from the local cache while fresh, otherwise fetched and cached."""
    storage = storage or get_local_storage()
    now = current_timestamp()
    max_age = settings.news_cache_minutes * 60 * 1000

    cached_time = storage.get_item(NEWS_TIME_KEY)
    cached_data = storage.get_json(NEWS_DATA_KEY)

    if not force_refresh and cached_time and isinstance(cached_data, list):
        try:
            age = now - int(cached_time)
        except ValueError:
            age = max_age
        if age < max_age:
            return sort_by_date([NewsItem(**item) for item in cached_data])

    items = sort_by_date(get_regulatory_news())

    # An empty fetch never overwrites the cache
    if items:
        storage.set_json(NEWS_DATA_KEY, [i.model_dump() for i in items])
        storage.set_item(NEWS_TIME_KEY, str(now))

    return items


def merge_archive(recent: List[NewsItem], history: List[NewsItem], now: Optional[datetime] = None) -> List[NewsItem]:
    """Older-than-a-week recent items plus history, newest first, one item per title."""
    combined = sort_by_date(older_news(recent, now) + history)
    unique = {}
    for item in combined:
        unique[item.title] = item
    return list(unique.values())


def get_news_archive(
    recent: List[NewsItem],
    storage: Optional[LocalStorage] = None,
) -> List[NewsItem]:
    storage = storage or get_local_storage()

    cached = storage.get_json(ARCHIVE_DATA_KEY)
    if isinstance(cached, list) and cached:
        return [NewsItem(**item) for item in cached]

    archive = merge_archive(recent, get_archived_regulatory_news())
    storage.set_json(ARCHIVE_DATA_KEY, [i.model_dump() for i in archive])
    return archive


def refresh_news_cache() -> int:
    """Scheduled job: refetch recent news into the cache."""
    items = get_cached_news(force_refresh=True)
    return len(items)
