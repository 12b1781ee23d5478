"""LionDine website client.

LionDine publishes one HTML page per meal period:

    https://liondine.com/breakfast
    https://liondine.com/lunch
    https://liondine.com/dinner
    https://liondine.com/latenight

Usage:
    async with LionDineClient() as client:
        html = await client.get_menu_page(MealCategory.LUNCH)
"""

from liondine.clients.base import BaseAsyncClient
from liondine.config import DEFAULT_USER_AGENT
from liondine.models import MealCategory


class LionDineClient(BaseAsyncClient):
    """Async client for the LionDine menu pages.

    Args:
        base_url: Site root (default: https://liondine.com)
        user_agent: User-Agent header sent with every page request
        timeout: Request timeout in seconds (default: 30)
    """

    def __init__(
        self,
        base_url: str = "https://liondine.com",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(
            base_url=base_url,
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml",
            },
            timeout=timeout,
        )

    async def get_menu_page(self, category: MealCategory) -> str:
        """Download the raw HTML for one meal period."""
        return await self.get_text(f"/{category.value}")
