import requests
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from contractwatch.exceptions import FeedUnavailable

logger = logging.getLogger(__name__)


@dataclass
class FeedPage:
    hit_count: int
    notices: List[Dict[str, Any]] = field(default_factory=list)


class ContractsFinderClient:
    """
    Client for the Contracts Finder notice search API (v2).
    Docs: https://www.contractsfinder.service.gov.uk/apidocumentation/V2

    One POST per search. Only the first page (up to `page_size` notices) is
    requested; anything beyond it is not fetched.
    """

    def __init__(self, base_url: Optional[str] = None, page_size: Optional[int] = None, timeout: Optional[int] = None):
        from contractwatch.database import settings

        self.base_url = base_url or settings.CONTRACTS_FINDER_URL
        self.page_size = page_size or settings.FEED_PAGE_SIZE
        self.timeout = timeout or settings.FEED_TIMEOUT
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": "Mozilla/5.0 (compatible; ContractWatch/1.0)",
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    def build_search_body(self, keyword: str) -> Dict[str, Any]:
        return {
            "searchCriteria": {
                "types": ["Contract"],
                "statuses": ["Open"],
                "keyword": keyword,
                "queryString": None,
                "regions": None,
                "postcode": None,
                "radius": 0.0,
                "valueFrom": None,
                "valueTo": None,
                "publishedFrom": None,
                "publishedTo": None,
                "deadlineFrom": None,
                "deadlineTo": None,
                "approachMarketFrom": None,
                "approachMarketTo": None,
                "awardedFrom": None,
                "awardedTo": None,
                "isSubcontract": None,
                "suitableForSme": True,
                "suitableForVco": False,
                "cpvCodes": None,
            },
            "size": self.page_size,
        }

    def search(self, keyword: str) -> FeedPage:
        """
        Runs a single keyword search. Raises FeedUnavailable on transport
        errors, non-2xx responses or a body that is not a JSON object.
        """
        try:
            response = self.session.post(self.base_url, json=self.build_search_body(keyword), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Contracts Finder request failed for '{keyword}': {e}")
            raise FeedUnavailable(f"Contracts Finder unreachable: {e}", keyword=keyword) from e

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            logger.error(f"HTTP Error: {response.status_code}")
            # Log first 500 chars of body to avoid massive logs if it's HTML
            logger.error(f"Response Body (partial): {response.text[:500]}")
            raise FeedUnavailable(
                f"HTTP error! status: {response.status_code}",
                keyword=keyword,
                status_code=response.status_code,
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise FeedUnavailable(
                "Contracts Finder returned a non-JSON body",
                keyword=keyword,
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            logger.error(f"Unexpected Contracts Finder body for '{keyword}': {str(data)[:500]}")
            raise FeedUnavailable(
                "Contracts Finder returned an unexpected body",
                keyword=keyword,
                status_code=response.status_code,
            )

        notices = data.get("noticeList") or []
        hit_count = data.get("hitCount") or 0
        logger.info(f"Found {hit_count} contracts for keyword: {keyword}")

        if hit_count > len(notices):
            logger.warning(
                f"Keyword '{keyword}' matched {hit_count} notices but only {len(notices)} were returned "
                f"(page size {self.page_size}); the remainder is not fetched."
            )

        return FeedPage(hit_count=hit_count, notices=notices)
