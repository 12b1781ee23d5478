"""Fetcher: LionDine page → plain menu text.

Downloads the meal page and reduces it to the visible text the structurer
reads. Scripts, styles and noscript blocks are dropped and whitespace is
collapsed to single spaces.
"""

import logging

from bs4 import BeautifulSoup

from liondine.clients import LionDineClient, UpstreamHTTPError
from liondine.config import DEFAULT_USER_AGENT
from liondine.errors import UpstreamFetchFailed
from liondine.models import MealCategory
from liondine.pipeline.ports import MenuFetcher

logger = logging.getLogger(__name__)

_STRIP_TAGS = ("script", "style", "noscript")


def extract_menu_text(html: str, strip_tags: tuple[str, ...] = _STRIP_TAGS) -> str:
    """Extract visible text from a menu page.

    Args:
        html: Raw page HTML
        strip_tags: Elements removed before text extraction

    Returns:
        Body text with runs of whitespace collapsed to one space
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(list(strip_tags)):
        tag.decompose()

    root = soup.body or soup
    return " ".join(root.get_text(" ").split())


class LionDineFetcher(MenuFetcher):
    """Fetches menu text from liondine.com.

    A fresh client is opened for each fetch.

    Usage:
        fetcher = LionDineFetcher()
        text = await fetcher.fetch(MealCategory.DINNER)

    Args:
        base_url: Site root
        user_agent: User-Agent header for page requests
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str = "https://liondine.com",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout

    async def fetch(self, category: MealCategory) -> str:
        logger.info("[Scraper] Fetching %s/%s", self.base_url, category.value)
        try:
            async with LionDineClient(
                base_url=self.base_url,
                user_agent=self.user_agent,
                timeout=self.timeout,
            ) as client:
                html = await client.get_menu_page(category)
        except UpstreamHTTPError as e:
            raise UpstreamFetchFailed(f"Failed to scrape menu page: {e}") from e

        text = extract_menu_text(html)
        logger.info("[Scraper] %s: extracted %d characters", category.value, len(text))
        return text
