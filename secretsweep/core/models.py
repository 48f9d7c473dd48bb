from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class RiskLevel(str, Enum):
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]


_RISK_RANK = {
    RiskLevel.INFO: 0,
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH: 3,
    RiskLevel.CRITICAL: 4,
}


class FindingType(str, Enum):
    """Finding categories. Values are the labels shown in reports."""

    GOOGLE_API_KEY = "Google API Key"
    FIREBASE_KEY = "Firebase Key"
    FCM_SERVER_KEY = "FCM Server Key"
    FCM_SENDER_ID = "FCM Sender ID"
    PRODUCTION_URL = "Production URL"
    STAGING_URL = "Staging URL"
    DEV_URL = "Development URL"
    ENDPOINT = "API Endpoint"
    PASSWORD = "Password"
    TOKEN = "Token"
    GENERIC_API_KEY = "Generic API Key"
    JNI_FUNCTION = "JNI Function"
    HARDCODED_STRING = "Hardcoded String"


@dataclass(frozen=True)
class Finding:
    value: str
    type: FindingType
    risk: RiskLevel
    file_name: str


@dataclass(frozen=True)
class PatternRule:
    id: str
    type: FindingType
    risk: RiskLevel
    regex: re.Pattern
    capture: int = 0


@dataclass(frozen=True)
class RiskReport:
    score: int
    level: RiskLevel
