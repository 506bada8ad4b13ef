"""
AI relevance rating for a single contract.
Builds a prompt from the contract and the organisation profile, asks an
OpenAI-compatible chat model for a JSON verdict and stores it on the record.
"""
import logging
import openai
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session
from contractwatch.exceptions import ContractNotFound, GenerationFailure, NoProfile
from contractwatch.services.rating.prompt import build_rating_prompt
from contractwatch.services.rating.response_parser import MalformedRating, parse_rating_response
from contractwatch.services.rating.schemas import RatingResult, degraded_rating
from contractwatch.services.store import NoticeStore

logger = logging.getLogger(__name__)

RATED_BY = "AI"


class RatingEngine:

    def __init__(self, db: Session, client=None, model: str = None, api_key: str = None, base_url: str = None):
        from contractwatch.database import settings

        self.db = db
        self.store = NoticeStore(db)
        self.model = model or settings.RATING_MODEL
        self.max_tokens = settings.RATING_MAX_TOKENS
        self.temperature = settings.RATING_TEMPERATURE

        if client is None:
            api_key = api_key or settings.OPENAI_API_KEY
            if not api_key:
                logger.warning("OPENAI_API_KEY not set. Contract rating will fail.")
            client = openai.Client(api_key=api_key, base_url=base_url or settings.OPENAI_BASE_URL)
        self.client = client

    def rate(self, item_id: str) -> RatingResult:
        """
        Rates one contract and saves the result.

        Raises ContractNotFound, NoProfile or GenerationFailure. A reply that
        cannot be parsed is saved as the degraded default instead of raising.
        """
        contract = self.store.get(item_id)
        if contract is None:
            raise ContractNotFound(item_id)

        profile = self.store.get_profile()
        if profile is None:
            raise NoProfile()

        prompt = build_rating_prompt(contract, profile)
        text = self._generate(prompt, item_id)

        outcome = parse_rating_response(text)
        if isinstance(outcome, MalformedRating):
            logger.warning(f"Unusable AI response for {item_id} ({outcome.reason}); using default rating")
            logger.debug(f"Raw response for {item_id}: {outcome.raw[:500]}")
            rating = degraded_rating()
        else:
            rating = outcome.result

        self.store.apply_rating(item_id, rating, rated_by=RATED_BY, rated_at=datetime.now(timezone.utc))
        logger.info(f"Rated contract {item_id}: {rating.score} ({rating.relevance})")
        return rating

    def _generate(self, prompt: str, item_id: str) -> Optional[str]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.error(f"AI rating call failed for {item_id}: {e}")
            raise GenerationFailure(f"Rating model call failed: {e}", model=self.model) from e

        if not response.choices:
            return None
        return response.choices[0].message.content
