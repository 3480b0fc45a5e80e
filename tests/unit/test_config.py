"""
Unit tests for application settings — defaults, env overrides, validation.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from simpleca.config import MAX_DAYS, AppSettings, KeySettings, ValiditySettings


class TestDefaults:
    def test_defaults_match_rsa_2048_and_ten_years(self) -> None:
        settings = AppSettings()
        assert settings.key.size == 2048
        assert settings.key.public_exponent == 65537
        assert settings.validity.before_days == 0
        assert settings.validity.after_days == 3650
        assert settings.log_level == "INFO"


class TestEnvironmentOverrides:
    def test_nested_validity_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """
        GIVEN SIMPLECA_VALIDITY__AFTER_DAYS=825 in the environment
        WHEN AppSettings is loaded
        THEN the nested validity default changes accordingly.
        """
        monkeypatch.setenv("SIMPLECA_VALIDITY__AFTER_DAYS", "825")
        assert AppSettings().validity.after_days == 825

    def test_log_level_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIMPLECA_LOG_LEVEL", "DEBUG")
        assert AppSettings().log_level == "DEBUG"

    def test_unsupported_key_size_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIMPLECA_KEY__SIZE", "4096")
        with pytest.raises(ValidationError, match="2048"):
            AppSettings()


class TestSubSettingsValidation:
    def test_key_exponent_must_be_f4(self) -> None:
        with pytest.raises(ValidationError, match="65537"):
            KeySettings(public_exponent=3)

    @pytest.mark.parametrize("days", [-1, MAX_DAYS + 1])
    def test_validity_days_out_of_range(self, days: int) -> None:
        with pytest.raises(ValidationError):
            ValiditySettings(after_days=days)

    def test_validity_days_upper_bound_accepted(self) -> None:
        assert ValiditySettings(before_days=MAX_DAYS).before_days == MAX_DAYS
