"""Deterministic provider data for simulation mode.

Four scenarios (low, medium, high, critical) are selected by the subject's
email address; unknown addresses fall back to the medium scenario.
"""

from __future__ import annotations

import copy
from typing import Any

SCENARIO_EMAILS = {
    "john.smith": "low",
    "maria.garcia": "medium",
    "david.cohen": "high",
    "vladimir.petrov": "critical",
}

DEFAULT_SCENARIO = "medium"


def _dimension(score: int, level: str, factors: list[str], reasoning: str) -> dict[str, Any]:
    return {"score": score, "level": level, "factors": factors, "reasoning": reasoning}


RISK_ASSESSMENTS: dict[str, dict[str, Any]] = {
    "low": {
        "identityRisk": _dimension(
            15, "low", ["Valid passport", "Consistent address history"],
            "Strong identity verification with consistent documentation",
        ),
        "industryRisk": _dimension(
            10, "low", ["Legitimate tech company", "Clean business record"],
            "Low-risk industry with established reputation",
        ),
        "networkRisk": _dimension(
            5, "low", ["No high-risk connections", "Professional network"],
            "Clean network with no suspicious associations",
        ),
        "securityRisk": _dimension(
            8, "low", ["No data breaches", "Secure email domain"],
            "No security incidents detected",
        ),
        "overallRisk": _dimension(
            10, "low", ["Low-risk profile across all dimensions"],
            "Comprehensive assessment indicates low risk profile",
        ),
    },
    "medium": {
        "identityRisk": _dimension(
            35, "medium", ["Recent address change", "Multiple passports"],
            "Some identity verification concerns due to recent changes",
        ),
        "industryRisk": _dimension(
            45, "medium", ["Trading company", "International operations"],
            "Medium-risk industry with international exposure",
        ),
        "networkRisk": _dimension(
            30, "medium", ["Some international connections", "Mixed business network"],
            "Moderate network risk with international exposure",
        ),
        "securityRisk": _dimension(
            25, "low", ["Minor data breach exposure", "Public social media presence"],
            "Some security concerns but not critical",
        ),
        "overallRisk": _dimension(
            34, "medium", ["Medium risk across multiple dimensions"],
            "Balanced risk profile with some areas of concern",
        ),
    },
    "high": {
        "identityRisk": _dimension(
            65, "high", ["Inconsistent documentation", "Multiple identities"],
            "Significant identity verification concerns",
        ),
        "industryRisk": _dimension(
            75, "high", ["Offshore company", "High-risk jurisdiction"],
            "High-risk industry with offshore operations",
        ),
        "networkRisk": _dimension(
            70, "high", ["High-risk connections", "Suspicious associations"],
            "Network contains multiple high-risk entities",
        ),
        "securityRisk": _dimension(
            60, "high", ["Multiple data breaches", "Dark web mentions"],
            "Significant security concerns detected",
        ),
        "overallRisk": _dimension(
            68, "high", ["High risk across multiple dimensions"],
            "Comprehensive assessment indicates high risk profile",
        ),
    },
    "critical": {
        "identityRisk": _dimension(
            85, "critical", ["Fake documentation", "Identity theft indicators"],
            "Critical identity verification issues detected",
        ),
        "industryRisk": _dimension(
            90, "critical", ["Sanctioned entities", "Illegal operations"],
            "Critical industry risk with sanctioned connections",
        ),
        "networkRisk": _dimension(
            95, "critical", ["Criminal network", "Terrorist financing links"],
            "Critical network risk with criminal associations",
        ),
        "securityRisk": _dimension(
            88, "critical", ["Major data breaches", "Blacklist matches"],
            "Critical security issues with blacklist matches",
        ),
        "overallRisk": _dimension(
            90, "critical", ["Critical risk across all dimensions"],
            "Immediate action required - critical risk profile",
        ),
    },
}

PERSON_INTELLIGENCE: dict[str, dict[str, Any]] = {
    "low": {
        "companyInfo": {
            "name": "TechCorp Ltd",
            "registrationNumber": "12345678",
            "status": "active",
            "incorporationDate": "2015-03-15",
            "directors": ["John Smith", "Jane Doe"],
            "riskFactors": [],
            "industry": "Technology",
        },
        "newsMentions": [
            {
                "title": "TechCorp Ltd Launches New Product",
                "source": "Tech News",
                "date": "2024-01-15",
                "sentiment": "positive",
                "relevance": "high",
            },
        ],
        "legalRecords": [],
    },
    "medium": {
        "companyInfo": {
            "name": "Global Trading Co",
            "registrationNumber": "87654321",
            "status": "active",
            "incorporationDate": "2018-07-22",
            "directors": ["Maria Garcia", "Carlos Rodriguez"],
            "riskFactors": [],
            "industry": "Trading",
        },
        "newsMentions": [
            {
                "title": "Global Trading Co Expands Operations",
                "source": "Business Daily",
                "date": "2024-02-10",
                "sentiment": "neutral",
                "relevance": "medium",
            },
        ],
        "legalRecords": [
            {
                "type": "regulatory_inquiry",
                "title": "Minor regulatory inquiry - resolved",
                "date": "2023-06-15",
                "status": "closed",
                "relevance": "low",
            },
        ],
    },
    "high": {
        "companyInfo": {
            "name": "Offshore Holdings Ltd",
            "registrationNumber": "OFF123456",
            "status": "active",
            "incorporationDate": "2020-01-10",
            "directors": ["David Cohen", "Unknown Director"],
            "riskFactors": ["Offshore jurisdiction", "Shell company indicators"],
            "industry": "Holding Company",
        },
        "newsMentions": [
            {
                "title": "Offshore Holdings Under Investigation",
                "source": "Financial Times",
                "date": "2024-03-01",
                "sentiment": "negative",
                "relevance": "high",
            },
        ],
        "legalRecords": [
            {
                "type": "investigation",
                "title": "Ongoing financial investigation",
                "date": "2024-02-15",
                "status": "active",
                "relevance": "high",
            },
        ],
    },
    "critical": {
        "companyInfo": {
            "name": "Eastern Ventures LLC",
            "registrationNumber": "EV789012",
            "status": "dissolved",
            "incorporationDate": "2019-11-30",
            "directors": ["Vladimir Petrov", "Unknown Director"],
            "riskFactors": ["Sanctioned jurisdiction", "Money laundering indicators"],
            "industry": "Unknown",
        },
        "newsMentions": [
            {
                "title": "Eastern Ventures Linked to Sanctioned Entities",
                "source": "Reuters",
                "date": "2024-03-15",
                "sentiment": "negative",
                "relevance": "high",
            },
            {
                "title": "Criminal Network Uncovered",
                "source": "BBC News",
                "date": "2024-03-10",
                "sentiment": "negative",
                "relevance": "high",
            },
        ],
        "legalRecords": [
            {
                "type": "criminal_case",
                "title": "Money laundering investigation",
                "date": "2024-01-20",
                "status": "active",
                "relevance": "high",
            },
            {
                "type": "sanctions_violation",
                "title": "Sanctions violation case",
                "date": "2024-02-28",
                "status": "active",
                "relevance": "high",
            },
        ],
    },
}

SANCTIONS: dict[str, list[dict[str, Any]]] = {
    "low": [
        {"list_name": "OFAC", "match": False, "confidence": 0, "note": "No matches found"},
        {"list_name": "UK Sanctions", "match": False, "confidence": 0, "note": "No matches found"},
    ],
    "medium": [
        {"list_name": "OFAC", "match": False, "confidence": 0, "note": "No matches found"},
    ],
    "high": [
        {"list_name": "OFAC", "match": False, "confidence": 0, "note": "No direct matches"},
    ],
    "critical": [
        {
            "list_name": "OFAC",
            "match": True,
            "confidence": 95,
            "entity": "PETROV, Vladimir",
            "note": "Potential match found",
        },
        {
            "list_name": "UK Sanctions",
            "match": True,
            "confidence": 90,
            "entity": "PETROV, Vladimir",
            "note": "Potential match found",
        },
    ],
}

BREACHES: dict[str, list[dict[str, Any]]] = {
    "low": [{"source": "haveibeenpwned", "breaches": [], "note": "No breaches found"}],
    "medium": [
        {"source": "haveibeenpwned", "breaches": ["LinkedIn 2021"], "note": "Minor breach exposure"},
    ],
    "high": [
        {
            "source": "haveibeenpwned",
            "breaches": ["LinkedIn 2021", "Adobe 2013", "Dropbox 2012"],
            "note": "Multiple breach exposures",
        },
    ],
    "critical": [
        {
            "source": "haveibeenpwned",
            "breaches": ["LinkedIn 2021", "Adobe 2013", "Dropbox 2012", "Yahoo 2013", "MySpace 2016"],
            "note": "Extensive breach exposure",
        },
    ],
}

DOCUMENT_ANALYSES: dict[str, dict[str, Any]] = {
    "passport": {
        "authenticity": {
            "score": 85,
            "indicators": ["Valid MRZ format", "Consistent fonts", "Proper hologram"],
            "concerns": [],
        },
        "dataConsistency": {
            "score": 90,
            "matches": ["Name matches user data", "Date of birth consistent"],
            "discrepancies": [],
        },
        "fraudIndicators": {"score": 15, "indicators": [], "riskLevel": "low"},
        "ocrAccuracy": {
            "score": 95,
            "extractedData": {"documentType": "passport"},
            "confidence": 0.95,
        },
        "overallAssessment": {
            "verificationStatus": "verified",
            "confidence": 90,
            "recommendations": ["Document appears authentic", "Proceed with verification"],
        },
    },
    "utility_bill": {
        "authenticity": {
            "score": 75,
            "indicators": ["Valid utility company", "Proper formatting"],
            "concerns": ["Recent document"],
        },
        "dataConsistency": {
            "score": 80,
            "matches": ["Address matches user data"],
            "discrepancies": ["Date is recent"],
        },
        "fraudIndicators": {"score": 25, "indicators": [], "riskLevel": "low"},
        "ocrAccuracy": {
            "score": 85,
            "extractedData": {"documentType": "utility_bill"},
            "confidence": 0.85,
        },
        "overallAssessment": {
            "verificationStatus": "verified",
            "confidence": 80,
            "recommendations": ["Document verified", "Consider additional proof of address"],
        },
    },
    "suspicious": {
        "authenticity": {
            "score": 45,
            "indicators": ["Basic formatting"],
            "concerns": ["Poor quality", "Inconsistent fonts", "Missing security features"],
        },
        "dataConsistency": {
            "score": 30,
            "matches": [],
            "discrepancies": ["Name mismatch", "Inconsistent dates"],
        },
        "fraudIndicators": {
            "score": 75,
            "indicators": ["Suspicious formatting", "Data inconsistencies", "Poor quality"],
            "riskLevel": "high",
        },
        "ocrAccuracy": {"score": 60, "extractedData": {}, "confidence": 0.6},
        "overallAssessment": {
            "verificationStatus": "rejected",
            "confidence": 70,
            "recommendations": [
                "Document appears fraudulent",
                "Require additional verification",
                "Flag for manual review",
            ],
        },
    },
}


def scenario_for_email(email: str) -> str:
    email_lower = email.lower()
    for needle, scenario in SCENARIO_EMAILS.items():
        if needle in email_lower:
            return scenario
    return DEFAULT_SCENARIO


def risk_assessment_for(email: str) -> dict[str, Any]:
    return copy.deepcopy(RISK_ASSESSMENTS[scenario_for_email(email)])


def person_intelligence_for(email: str) -> dict[str, Any]:
    return copy.deepcopy(PERSON_INTELLIGENCE[scenario_for_email(email)])


def sanctions_for(email: str) -> list[dict[str, Any]]:
    return copy.deepcopy(SANCTIONS[scenario_for_email(email)])


def breaches_for(email: str) -> list[dict[str, Any]]:
    return copy.deepcopy(BREACHES[scenario_for_email(email)])


def document_analysis_for(document_type: str, email: str) -> dict[str, Any]:
    if scenario_for_email(email) in ("high", "critical"):
        return copy.deepcopy(DOCUMENT_ANALYSES["suspicious"])
    if document_type == "utility_bill":
        return copy.deepcopy(DOCUMENT_ANALYSES["utility_bill"])
    return copy.deepcopy(DOCUMENT_ANALYSES["passport"])
