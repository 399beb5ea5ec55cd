from __future__ import annotations

from dataset_generator.llm.prompts import BUSINESS_TYPE_GUIDANCE
from dataset_generator.llm.prompts import SpecPromptParams
from dataset_generator.llm.prompts import build_spec_prompt
from dataset_generator.llm.prompts import build_user_message


def test_cache_key_is_stable_and_parameter_sensitive() -> None:
    first = SpecPromptParams(business_type="Ecommerce", schema_type="OBT", time_range=["2024"])
    same = SpecPromptParams(business_type="Ecommerce", schema_type="OBT", time_range=["2024"])
    other = SpecPromptParams(business_type="Ecommerce", schema_type="Star Schema", time_range=["2024"])

    assert first.cache_key() == same.cache_key()
    assert first.cache_key() != other.cache_key()
    assert len(first.cache_key()) == 64


def test_unknown_business_type_uses_custom_guidance() -> None:
    prompt = build_spec_prompt(SpecPromptParams(business_type="Pet Grooming", schema_type="OBT"))

    assert "'Pet Grooming'" in prompt
    assert BUSINESS_TYPE_GUIDANCE["Custom"] in prompt


def test_prompt_includes_metadata_and_schema_section() -> None:
    params = SpecPromptParams(
        business_type="Healthcare",
        schema_type="Star Schema",
        time_range=["2023", "2024"],
        growth_pattern="Steady",
        context="Regional hospital network",
    )

    prompt = build_spec_prompt(params)

    assert BUSINESS_TYPE_GUIDANCE["Healthcare"] in prompt
    assert '"time_range": ["2023", "2024"]' in prompt
    assert '"growth_pattern": "Steady"' in prompt
    assert "Regional hospital network" in prompt
    assert "_fact" in prompt
    assert "star schema" in build_user_message(params)
