from datetime import datetime
from decimal import Decimal

from contractwatch.models import ContractRecord
from contractwatch.services.rating.prompt import build_rating_prompt

def _contract():
    return ContractRecord(
        item_id="p-1",
        title="Analytics platform",
        organisation_name="NHS Digital",
        description="Build a reporting platform",
        value_low=Decimal("20000"),
        value_high=Decimal("150000"),
        postcode="LS1 6AE",
        is_suitable_for_sme=True,
        cpv_codes="72000000 72300000",
        published_date=datetime(2024, 3, 1),
        deadline_date=datetime(2024, 4, 15),
    )

def test_prompt_contains_contract_and_profile_fields(profile):
    prompt = build_rating_prompt(_contract(), profile)

    assert "Name: Acme Data Ltd" in prompt
    assert "Capabilities: data pipelines, dashboards" in prompt
    assert "Exclusions: construction" in prompt
    assert "Location: Leeds" in prompt
    assert "Title: Analytics platform" in prompt
    assert "Value Range: £20,000 - £150,000" in prompt
    assert "SME Suitable: Yes" in prompt
    assert "CPV Codes: 72000000 72300000" in prompt
    assert "Deadline: 15/04/2024" in prompt
    assert '"opportunityDescription"' in prompt
    assert '"matchReasons"' in prompt
    assert prompt.endswith("Only return valid JSON, no additional text.")

def test_prompt_is_deterministic(profile):
    contract = _contract()
    assert build_rating_prompt(contract, profile) == build_rating_prompt(contract, profile)

def test_prompt_placeholders_for_missing_values(profile):
    profile.exclusions = []
    contract = ContractRecord(item_id="p-2", title="Bare notice")

    prompt = build_rating_prompt(contract, profile)

    assert "Exclusions: None specified" in prompt
    assert "Value Range: £Not specified - £Not specified" in prompt
    assert "SME Suitable: No" in prompt
    assert "Published Date: Not specified" in prompt
