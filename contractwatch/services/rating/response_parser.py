"""
Turns raw model text into a tagged outcome. Nothing here raises: a reply
that cannot be used becomes MalformedRating and the caller decides what to
do with it.
"""
import json
import logging
from dataclasses import dataclass
from typing import Optional, Union
from pydantic import ValidationError
from contractwatch.services.rating.schemas import RatingResult

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("score", "relevance", "explanation")


@dataclass
class ParsedRating:
    result: RatingResult


@dataclass
class MalformedRating:
    reason: str
    raw: str = ""


RatingOutcome = Union[ParsedRating, MalformedRating]


def extract_json_object(text: str) -> Optional[str]:
    """Returns the first balanced {...} span in `text`, ignoring braces inside strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        # Unbalanced from this opening brace; try the next one
        start = text.find("{", start + 1)
    return None


def _missing(value) -> bool:
    # Any falsy value counts, a score of 0 included
    return not value


def parse_rating_response(text: Optional[str]) -> RatingOutcome:
    if not text:
        return MalformedRating("Empty response", raw="")

    span = extract_json_object(text)
    if span is None:
        return MalformedRating("No JSON found in AI response", raw=text)

    try:
        payload = json.loads(span)
    except json.JSONDecodeError as e:
        return MalformedRating(f"Invalid JSON: {e}", raw=text)

    if not isinstance(payload, dict):
        return MalformedRating("JSON is not an object", raw=text)

    missing = [k for k in REQUIRED_KEYS if _missing(payload.get(k))]
    if missing:
        return MalformedRating(f"Invalid rating structure from AI, missing {', '.join(missing)}", raw=text)

    try:
        return ParsedRating(RatingResult.model_validate(payload))
    except ValidationError as e:
        return MalformedRating(f"Rating failed validation: {e.error_count()} error(s)", raw=text)
