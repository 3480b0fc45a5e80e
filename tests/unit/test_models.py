"""
Unit tests for domain models — value objects.

Verifies frozen dataclass behavior, defaults, and computed properties.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from simpleca.domain.models import (
    CertificateSummary,
    ExtensionRecord,
    ExtensionRequest,
    Profile,
    ValidityWindow,
)

_T0 = datetime(2024, 1, 1, tzinfo=UTC)


class TestValidityWindow:
    def test_bounds_default_to_none(self) -> None:
        window = ValidityWindow()
        assert window.not_before is None
        assert window.not_after is None

    def test_frozen_prevents_mutation(self) -> None:
        """
        GIVEN a frozen ValidityWindow
        WHEN attempting to modify a bound
        THEN an AttributeError is raised.
        """
        window = ValidityWindow(not_before=_T0)
        with pytest.raises(AttributeError):
            window.not_before = None  # type: ignore[misc]

    def test_naive_bound_is_rejected(self) -> None:
        """
        GIVEN a datetime without tzinfo
        WHEN it is used as a bound
        THEN construction fails instead of the encoder reading it as local time.
        """
        with pytest.raises(ValueError, match="not_after must be timezone-aware"):
            ValidityWindow(not_before=_T0, not_after=datetime(2034, 1, 1))

    def test_aware_non_utc_bound_is_accepted(self) -> None:
        berlin = timezone(timedelta(hours=1))
        window = ValidityWindow(not_before=datetime(2024, 1, 1, 13, tzinfo=berlin))
        assert window.not_before == datetime(2024, 1, 1, 12, tzinfo=UTC)


class TestExtensionRequest:
    def test_default_request_is_empty(self) -> None:
        assert ExtensionRequest().is_empty

    def test_profile_makes_request_non_empty(self) -> None:
        assert not ExtensionRequest(profile=Profile.CLIENT).is_empty

    def test_san_without_profile_is_non_empty(self) -> None:
        request = ExtensionRequest(san_dns=("a.example",))
        assert request.profile is None
        assert not request.is_empty


class TestExtensionRecord:
    def test_value_is_hidden_from_repr(self) -> None:
        record = ExtensionRecord(oid="2.5.29.19", critical=True, value=b"\x30\x03\x01\x01\xff")
        assert "2.5.29.19" in repr(record)
        assert "value" not in repr(record)

    def test_records_compare_by_content(self) -> None:
        assert ExtensionRecord("2.5.29.14", False, b"\x04\x00") == ExtensionRecord("2.5.29.14", False, b"\x04\x00")


class TestCertificateSummary:
    def _summary(self, subject: str, issuer: str) -> CertificateSummary:
        return CertificateSummary(
            subject=subject,
            issuer=issuer,
            serial_number=1,
            not_before=_T0,
            not_after=_T0,
            extensions=[
                ExtensionRecord("2.5.29.19", True, b""),
                ExtensionRecord("2.5.29.19", False, b""),
            ],
        )

    def test_self_issued_when_subject_equals_issuer(self) -> None:
        assert self._summary("CN=ca", "CN=ca").is_self_issued
        assert not self._summary("CN=leaf", "CN=ca").is_self_issued

    def test_extension_oids_keep_duplicates_in_order(self) -> None:
        assert self._summary("CN=a", "CN=a").extension_oids == ["2.5.29.19", "2.5.29.19"]
