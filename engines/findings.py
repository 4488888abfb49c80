"""
Recommendation data types shared by every analyzer in the engine.
"""

import hashlib
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class RecommendationType(Enum):
    TRAINING_REQUIRED = "training_required"
    CERTIFICATION_EXPIRING = "certification_expiring"
    COMPLIANCE_GAP = "compliance_gap"
    PROACTIVE_TRAINING = "proactive_training"
    RISK_MITIGATION = "risk_mitigation"


class Priority(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


class CostImpact(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


PRIORITY_RANK = {
    Priority.CRITICAL: 4,
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


@dataclass
class Recommendation:
    """Individual compliance action"""
    id: str
    type: RecommendationType
    priority: Priority
    title: str
    description: str
    action_required: str
    estimated_completion_time: str
    created_at: datetime
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    department: Optional[str] = None
    due_date: Optional[datetime] = None
    compliance_standards: List[str] = field(default_factory=list)
    cost_impact: CostImpact = CostImpact.MEDIUM
    risk_level: Priority = Priority.MEDIUM
    recommended_training: List[str] = field(default_factory=list)
    ai_insight: Optional[str] = None

    def __post_init__(self):
        if not self.title.strip() or not self.action_required.strip():
            raise ValueError(f"Recommendation {self.id} needs a title and a required action")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'employee_id': self.employee_id,
            'employee_name': self.employee_name,
            'department': self.department,
            'type': self.type.value,
            'priority': self.priority.value,
            'title': self.title,
            'description': self.description,
            'action_required': self.action_required,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'estimated_completion_time': self.estimated_completion_time,
            'compliance_standards': list(self.compliance_standards),
            'cost_impact': self.cost_impact.value,
            'risk_level': self.risk_level.value,
            'recommended_training': list(self.recommended_training),
            'ai_insight': self.ai_insight,
            'created_at': self.created_at.isoformat(),
        }


def slugify(value: str) -> str:
    """Turn a free-text label into an identifier fragment ("Lockout/Tagout" -> "lockout-tagout")."""
    slug = re.sub(r'[^a-z0-9]+', '-', value.lower()).strip('-')
    return slug or 'unnamed'


def identifier_fragments(labels: Iterable[str]) -> Dict[str, str]:
    """Map each distinct label to an id fragment unique within the set.

    Labels keep their plain slug unless another label slugs the same way
    ("Sales Ops" / "Sales-Ops"); those get a digest of the exact label appended.
    """
    by_slug: Dict[str, List[str]] = defaultdict(list)
    for label in sorted(set(labels)):
        by_slug[slugify(label)].append(label)

    fragments = {}
    for slug, group in by_slug.items():
        for label in group:
            if len(group) == 1:
                fragments[label] = slug
            else:
                fragments[label] = f"{slug}-{hashlib.sha1(label.encode('utf-8')).hexdigest()[:8]}"
    return fragments
