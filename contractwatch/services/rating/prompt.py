from datetime import datetime
from typing import Iterable, Optional
from contractwatch.models import ContractRecord, OrganisationProfile

NOT_SPECIFIED = "Not specified"


def _join(values: Optional[Iterable[str]], empty: str = "") -> str:
    values = [v for v in (values or []) if v]
    return ", ".join(values) if values else empty


def _money(value) -> str:
    if value is None:
        return NOT_SPECIFIED
    return f"{value:,.0f}"


def _date(value: Optional[datetime]) -> str:
    return value.strftime("%d/%m/%Y") if value else NOT_SPECIFIED


def build_organisation_summary(profile: OrganisationProfile) -> str:
    parts = [
        f"Name: {profile.name}",
        f"Description: {profile.description}",
        f"Industry: {profile.industry}",
        f"Size: {profile.size}",
        f"Capabilities: {_join(profile.capabilities)}",
        f"Interests: {_join(profile.interests)}",
        f"Exclusions: {_join(profile.exclusions, 'None specified')}",
        f"Location: {profile.location or NOT_SPECIFIED}",
    ]
    return "\n".join(parts)


def build_contract_summary(contract: ContractRecord) -> str:
    parts = [
        f"Title: {contract.title or NOT_SPECIFIED}",
        f"Organisation: {contract.organisation_name or NOT_SPECIFIED}",
        f"Description: {contract.description or NOT_SPECIFIED}",
        f"Value Range: £{_money(contract.value_low)} - £{_money(contract.value_high)}",
        f"Location: {contract.postcode or NOT_SPECIFIED}",
        f"SME Suitable: {'Yes' if contract.is_suitable_for_sme else 'No'}",
        f"CPV Codes: {contract.cpv_codes or NOT_SPECIFIED}",
        f"Published Date: {_date(contract.published_date)}",
        f"Deadline: {_date(contract.deadline_date)}",
    ]
    return "\n".join(parts)


def build_rating_prompt(contract: ContractRecord, profile: OrganisationProfile) -> str:
    """Same record and profile always give the same prompt."""
    return f"""You are an expert business development consultant. Your task is to rate how well a government contract opportunity matches an organisation's profile.

ORGANISATION PROFILE:
{build_organisation_summary(profile)}

CONTRACT OPPORTUNITY:
{build_contract_summary(contract)}

Please provide a comprehensive rating in the following JSON format:

{{
  "score": <number between 0-10>,
  "relevance": "<low|medium|high|excellent>",
  "explanation": "<brief explanation of the rating>",
  "opportunityDescription": "<detailed description of what this opportunity involves and why it might be interesting>",
  "matchReasons": [
    "<reason 1 why this matches the organisation>",
    "<reason 2 why this matches the organisation>",
    "<reason 3 why this matches the organisation>"
  ]
}}

Consider:
- How well the contract aligns with the organisation's capabilities and interests
- Whether the contract involves any work that the organisation explicitly excludes
- The organisation's size and whether it can handle this type of contract
- Value range and whether it's appropriate for the organisation's size
- Technical requirements and whether the organisation has the necessary expertise
- If the contract involves excluded work, this should significantly lower the rating

Only return valid JSON, no additional text."""
