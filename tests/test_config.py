from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import Settings


def test_cors_origins_are_split_and_trimmed():
    settings = Settings(CORS_ORIGINS=" https://a.example , ,https://b.example")
    assert settings.cors_origins == ["https://a.example", "https://b.example"]


def test_log_level_is_normalised():
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValidationError):
        Settings(LOG_LEVEL="chatty")
