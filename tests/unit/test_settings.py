"""
Unit Tests - Configuration
"""
from datetime import date

import pytest

from sales_analytics.config import ReportingSettings, Settings


class TestReportingSettings:
    """Tests for reporting thresholds"""

    def test_defaults(self):
        config = ReportingSettings()

        assert config.vip_min_lifespan_months == 12
        assert config.vip_min_spend == 5000.0
        assert config.product_high_threshold == 50000.0
        assert config.product_mid_threshold == 10000.0
        assert config.include_inactive is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("REPORT_VIP_MIN_SPEND", "2500")
        monkeypatch.setenv("REPORT_REFERENCE_DATE", "2024-06-01")
        monkeypatch.setenv("REPORT_INCLUDE_INACTIVE", "false")

        config = ReportingSettings()

        assert config.vip_min_spend == 2500.0
        assert config.reference_date == date(2024, 6, 1)
        assert config.include_inactive is False

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            ReportingSettings(vip_min_spend=-1)

    def test_empty_bounds_rejected(self):
        with pytest.raises(ValueError):
            ReportingSettings(cost_range_bounds=[])


class TestSettings:
    """Tests for application settings"""

    def test_testing_environment(self, test_settings):
        assert test_settings.app_env == "testing"
        assert not test_settings.is_production

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "moon")
        with pytest.raises(ValueError):
            Settings()

    def test_warehouse_source(self, monkeypatch):
        monkeypatch.setenv("WAREHOUSE_SOURCE", "DATABASE")
        assert Settings().warehouse_source == "database"

    def test_invalid_warehouse_source(self, monkeypatch):
        monkeypatch.setenv("WAREHOUSE_SOURCE", "ftp")
        with pytest.raises(ValueError):
            Settings()

    def test_database_url_override(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_URL", "sqlite+aiosqlite:///:memory:")
        assert Settings().database.async_url == "sqlite+aiosqlite:///:memory:"
