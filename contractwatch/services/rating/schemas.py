from typing import List, Literal
from pydantic import BaseModel, ConfigDict, Field

Relevance = Literal["low", "medium", "high", "excellent"]


class RatingResult(BaseModel):
    """Structured rating returned by the model, keyed the way the prompt asks."""

    model_config = ConfigDict(populate_by_name=True)

    score: float = Field(ge=0, le=10)
    relevance: Relevance
    explanation: str
    opportunity_description: str = Field(default="", alias="opportunityDescription")
    match_reasons: List[str] = Field(default_factory=list, alias="matchReasons")


def degraded_rating() -> RatingResult:
    """Fallback used when the model answered but not in the expected shape."""
    return RatingResult(
        score=5,
        relevance="medium",
        explanation="Unable to parse AI response. Manual review recommended.",
        opportunity_description="Please review this opportunity manually.",
        match_reasons=["Manual review required"],
    )
