"""
tests/conftest.py — Shared fixtures for all tests.

Adds src/ to sys.path so the package imports without being installed, and
provides an in-memory stand-in for the AdminService connection.
"""
import pathlib
import sys
from datetime import datetime, timedelta, timezone

import pytest

SRC = pathlib.Path(__file__).parent.parent / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cm_health.config import Settings  # noqa: E402


class FakeConnection:
    """Answers queries from a {class_name: rows | exception} mapping."""

    def __init__(self, answers=None):
        self.answers = dict(answers or {})
        self.calls = []
        self.closed = False

    def query(self, class_name, select=None, where=None):
        self.calls.append((class_name, where))
        answer = self.answers.get(class_name, [])
        if isinstance(answer, BaseException):
            raise answer
        if callable(answer):
            return answer(where)
        return answer

    def close(self):
        self.closed = True


def healthy_answers():
    """Rows for every class the built-in catalogue queries, all within defaults."""
    return {
        "SMS_Site": [{"SiteCode": "PS1", "SiteName": "Primary", "Status": 1, "Version": "5.00.9122.1000"}],
        "Win32_Processor": [{"Name": "CPU0", "LoadPercentage": 20}, {"Name": "CPU1", "LoadPercentage": 30}],
        "Win32_OperatingSystem": [{"TotalVisibleMemorySize": 16000000, "FreePhysicalMemory": 8000000}],
        "SMS_SiteSystemSummarizer": lambda where: [
            {
                "SiteSystem": "\\\\CM01.corp.local",
                "Role": "SMS Site Server" if where and "Site Server" in where else "SMS SQL Server",
                "Status": 0,
                "PercentFree": 42.5,
            }
        ],
        "Win32_Service": [
            {"Name": "SMS_EXECUTIVE", "State": "Running"},
            {"Name": "SMS_SITE_COMPONENT_MANAGER", "State": "Running"},
            {"Name": "CONFIGURATION_MANAGER_UPDATE", "State": "Running"},
        ],
        "SMS_ComponentSummarizer": [],
        "SMS_DPStatusInfo": [{"Name": "DP01.corp.local", "NumberErrors": 0, "NumberInstalled": 120}],
        "SMS_PackageStatusDistPointsSummarizer": [],
        "SMS_CombinedDeviceResources": [
            {"Name": f"PC{i:03d}", "IsClient": True, "ClientActiveStatus": 1} for i in range(20)
        ],
        "SMS_CollectionEvaluationStats": [
            {"CollectionID": "SMS00001", "Name": "All Systems", "EvaluationLength": 4500},
        ],
        "SMS_SUPSyncStatus": lambda where: [
            {
                "WSUSServerName": "CM01.corp.local",
                "LastSuccessfulSyncTime": (datetime.now(timezone.utc) - timedelta(hours=2)).isoformat(),
                "LastSyncState": 6702,
            }
        ],
    }


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def settings(tmp_path):
    return Settings(provider="cm01.corp.local", site_code="PS1", output_path=tmp_path / "report.html")
