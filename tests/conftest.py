"""Shared fixtures for the ALwrity test suite."""

import pytest

from alwrity.config import get_settings
from alwrity.models.outline import OutlineSection, SectionType
from alwrity.utils.usage import get_usage_tracker


@pytest.fixture(autouse=True)
def reset_usage():
    """Start every test with zeroed usage counters."""
    get_usage_tracker().reset()
    yield
    get_usage_tracker().reset()


@pytest.fixture
def settings():
    """Settings with no real credentials and no settling delay."""
    return get_settings().model_copy(update={
        "openai_api_key": None,
        "gemini_api_key": None,
        "gsc_access_token": None,
        "gsc_site_url": None,
        "default_ai_provider": "openai",
        "generation_settle_seconds": 0,
        "outline_requests_per_minute": 5,
    })


@pytest.fixture
def three_sections():
    """An Intro / Body1 / Conclusion outline with no content yet."""
    return [
        OutlineSection(id="intro", title="Intro", keywords=["notary"],
                       section_type=SectionType.INTRODUCTION),
        OutlineSection(id="body1", title="Body1", keywords=["apostille"]),
        OutlineSection(id="conclusion", title="Conclusion",
                       section_type=SectionType.CONCLUSION),
    ]
