#!/usr/bin/env python3
"""
Proactive Trend Analyzer
Surfaces training topics that keep recurring in recently processed documents
"""

from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

from database.records import ProcessedDocument
from engines.findings import CostImpact, Priority, Recommendation, RecommendationType, identifier_fragments

TREND_LOOKBACK_DAYS = 90
# Deliberately low: sparse upload data should still surface a signal
TREND_FREQUENCY_THRESHOLD = 2
PROACTIVE_DUE_DAYS = 60


def normalize_training_type(label: str) -> str:
    """Spelling-insensitive key: "Fall  protection" and "fall Protection" are one topic"""
    return " ".join(label.split()).casefold()


class ProactiveTrendAnalyzer:
    """Frequency count of training types; not a statistical trend test"""

    def training_frequency(self, documents: Iterable[ProcessedDocument], now: datetime) -> Dict[str, int]:
        """Recent document count per training topic, keyed by the topic's most common spelling"""
        cutoff = now - timedelta(days=TREND_LOOKBACK_DAYS)
        spellings: Dict[str, Counter] = defaultdict(Counter)
        for doc in documents:
            if doc.processed_at > cutoff and doc.training_type:
                spellings[normalize_training_type(doc.training_type)][doc.training_type] += 1

        frequency = {}
        for counts in spellings.values():
            label = min(counts, key=lambda spelling: (-counts[spelling], spelling))
            frequency[label] = sum(counts.values())
        return frequency

    def analyze(self, documents: Iterable[ProcessedDocument], now: datetime) -> List[Recommendation]:
        frequency = self.training_frequency(documents, now)
        trending = sorted(t for t, count in frequency.items() if count >= TREND_FREQUENCY_THRESHOLD)
        fragments = identifier_fragments(trending)
        return [self._proactive_recommendation(t, fragments[t], now) for t in trending]

    def _proactive_recommendation(self, training_type: str, fragment: str, now: datetime) -> Recommendation:
        return Recommendation(
            id=f"proactive-{fragment}",
            type=RecommendationType.PROACTIVE_TRAINING,
            priority=Priority.MEDIUM,
            title=f"Enhanced {training_type} Program Recommended",
            description=(f"Recent training data shows increased focus on {training_type}. "
                         f"Consider implementing advanced modules."),
            action_required=f"Evaluate and potentially implement advanced {training_type} training modules",
            due_date=now + timedelta(days=PROACTIVE_DUE_DAYS),
            estimated_completion_time="2-4 hours per employee",
            compliance_standards=["29 CFR 1926.95", "29 CFR 1926.501"],
            cost_impact=CostImpact.LOW,
            risk_level=Priority.LOW,
            recommended_training=[f"Advanced {training_type}"],
            created_at=now,
        )
