#!/usr/bin/env python3
"""
Insight Augmenter
Asks an external text-generation collaborator for a narrative summary of the
organization's compliance posture. Advisory only: every failure degrades to a
fixed fallback string and never reaches the caller.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Protocol

import requests
from pydantic import BaseModel, ConfigDict, Field

from core.config import NarrativeSettings
from core.logging import get_logger
from database.records import CertificateStatus, OrganizationSnapshot
from engines.certification_lifecycle import EXPIRING_SOON_WINDOW_DAYS, get_expiring_certificates
from engines.findings import Recommendation

logger = get_logger(__name__)

FALLBACK_NARRATIVE = "AI analysis temporarily unavailable - using fallback compliance analysis"

SYSTEM_PROMPT = (
    "You are an expert OSHA compliance analyst specializing in workplace safety recommendations. "
    "Provide detailed, actionable insights based on compliance data."
)


class NarrativeSummary(BaseModel):
    """Compact statistics handed to the text-generation collaborator; never raw records"""

    model_config = ConfigDict(frozen=True)

    organization_id: str
    total_members: int = 0
    departments: List[str] = Field(default_factory=list)
    positions: List[str] = Field(default_factory=list)
    active_certificates: int = 0
    expiring_soon: int = 0
    certificate_types: List[str] = Field(default_factory=list)
    training_sessions: int = 0
    training_types: List[str] = Field(default_factory=list)
    findings: Dict[str, int] = Field(default_factory=dict)


def build_narrative_summary(snapshot: OrganizationSnapshot, findings: Iterable[Recommendation],
                            now: datetime) -> NarrativeSummary:
    counts: Dict[str, int] = {}
    for rec in findings:
        counts[rec.type.value] = counts.get(rec.type.value, 0) + 1

    certificates = snapshot.certificates
    return NarrativeSummary(
        organization_id=snapshot.organization_id,
        total_members=len(snapshot.members),
        departments=sorted({m.department for m in snapshot.members}),
        positions=sorted({m.position for m in snapshot.members if m.position}),
        active_certificates=sum(1 for c in certificates if c.status == CertificateStatus.ACTIVE),
        expiring_soon=len(get_expiring_certificates(certificates, EXPIRING_SOON_WINDOW_DAYS, now)),
        certificate_types=sorted({c.certification_type for c in certificates}),
        training_sessions=len(snapshot.training_sessions),
        training_types=sorted({s.session_name for s in snapshot.training_sessions}),
        findings=dict(sorted(counts.items())),
    )


def build_prompt(summary: NarrativeSummary) -> str:
    findings = ", ".join(f"{kind}: {count}" for kind, count in summary.findings.items()) or "none"
    return f"""
Analyze the following safety compliance data and provide intelligent insights:

EMPLOYEE DATA:
- Total Employees: {summary.total_members}
- Departments: {', '.join(summary.departments)}
- Positions: {', '.join(summary.positions)}

CERTIFICATE DATA:
- Active Certificates: {summary.active_certificates}
- Expiring Soon ({EXPIRING_SOON_WINDOW_DAYS} days): {summary.expiring_soon}
- Certificate Types: {', '.join(summary.certificate_types)}

TRAINING DATA:
- Recent Training Sessions: {summary.training_sessions}
- Training Types: {', '.join(summary.training_types)}

ENGINE FINDINGS:
- {findings}

Provide insights on:
1. Risk patterns and compliance gaps
2. Proactive training opportunities
3. Department-specific recommendations
4. Cost-effective compliance strategies
5. Emerging compliance trends

Return your analysis as a comprehensive insight summary focusing on actionable recommendations.
""".strip()


class NarrativeProvider(Protocol):
    def request_narrative(self, summary: NarrativeSummary) -> str:
        ...


class FallbackNarrativeProvider:
    """Provider used when text generation is disabled"""

    def request_narrative(self, summary: NarrativeSummary) -> str:
        return FALLBACK_NARRATIVE


class StaticNarrativeProvider:
    """Returns the same narrative for every summary"""

    def __init__(self, narrative: str):
        self.narrative = narrative

    def request_narrative(self, summary: NarrativeSummary) -> str:
        return self.narrative


class ChatCompletionNarrativeProvider:
    """OpenAI-compatible chat completions endpoint over HTTP"""

    def __init__(self, api_url: str, api_key: Optional[str], model: str = "gpt-4o",
                 timeout_seconds: float = 20.0, max_tokens: int = 1000):
        self.endpoint = f"{api_url.rstrip('/')}/chat/completions"
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens

    def request_narrative(self, summary: NarrativeSummary) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(summary)},
            ],
            "max_tokens": self.max_tokens,
        }
        response = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.timeout_seconds)
        response.raise_for_status()
        data = response.json()
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ValueError("Malformed chat completion response") from exc
        if not isinstance(content, str):
            raise ValueError("Chat completion content is not text")
        return content


def build_narrative_provider(settings: NarrativeSettings) -> NarrativeProvider:
    """Select a provider from configuration; disabled or unconfigured means fallback"""
    if not settings.enabled:
        return FallbackNarrativeProvider()
    if not settings.api_url:
        logger.warning("narrative_provider_unconfigured", reason="missing NARRATIVE_API_URL")
        return FallbackNarrativeProvider()
    return ChatCompletionNarrativeProvider(
        api_url=settings.api_url,
        api_key=settings.api_key,
        model=settings.model,
        timeout_seconds=settings.timeout_seconds,
        max_tokens=settings.max_tokens,
    )


class InsightAugmenter:
    """Single attempt, bounded by a timeout, fallback on any failure"""

    def __init__(self, provider: NarrativeProvider, timeout_seconds: float = 20.0):
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    @property
    def enabled(self) -> bool:
        """False when text generation is switched off"""
        return not isinstance(self.provider, FallbackNarrativeProvider)

    def generate(self, summary: NarrativeSummary) -> str:
        if not self.enabled:
            return FALLBACK_NARRATIVE

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="narrative")
        try:
            future = executor.submit(self.provider.request_narrative, summary)
            narrative = future.result(timeout=self.timeout_seconds)
        except FuturesTimeoutError:
            logger.warning("narrative_fallback_used", reason="timeout", timeout_seconds=self.timeout_seconds)
            return FALLBACK_NARRATIVE
        except Exception as exc:
            logger.warning("narrative_fallback_used", reason=type(exc).__name__, error=str(exc))
            return FALLBACK_NARRATIVE
        finally:
            # a hung provider call is abandoned, not awaited
            executor.shutdown(wait=False, cancel_futures=True)

        if not isinstance(narrative, str) or not narrative.strip():
            logger.warning("narrative_fallback_used", reason="empty_response")
            return FALLBACK_NARRATIVE
        return narrative.strip()
