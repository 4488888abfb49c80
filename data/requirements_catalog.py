#!/usr/bin/env python3
"""
Department Requirement Catalog - OSHA-driven certification requirements
Default table of the certifications each department is expected to hold
"""

from typing import Any, Dict, List

from engines.catalog import RequirementCatalog

DEFAULT_CATALOG_VERSION = "2024.1"

# gracePeriod: days before a missing certification is escalated
DEPARTMENT_REQUIREMENTS: Dict[str, List[Dict[str, Any]]] = {
    "Construction": [
        {"name": "Fall Protection", "criticality": "critical", "duration": "8 hours",
         "standards": ["29 CFR 1926.501"], "gracePeriod": 30},
        {"name": "OSHA 10-Hour Construction", "criticality": "high", "duration": "10 hours",
         "standards": ["29 CFR 1926"], "gracePeriod": 60},
        {"name": "Scaffold Safety", "criticality": "high", "duration": "4 hours",
         "standards": ["29 CFR 1926.451"], "gracePeriod": 45},
    ],
    "Manufacturing": [
        {"name": "Machine Guarding", "criticality": "critical", "duration": "4 hours",
         "standards": ["29 CFR 1910.212"], "gracePeriod": 30},
        {"name": "Lockout/Tagout", "criticality": "critical", "duration": "6 hours",
         "standards": ["29 CFR 1910.147"], "gracePeriod": 30},
        {"name": "Hearing Conservation", "criticality": "medium", "duration": "2 hours",
         "standards": ["29 CFR 1910.95"], "gracePeriod": 90},
    ],
    "Maintenance": [
        {"name": "Confined Space Entry", "criticality": "critical", "duration": "8 hours",
         "standards": ["29 CFR 1910.146"], "gracePeriod": 30},
        {"name": "Electrical Safety", "criticality": "critical", "duration": "6 hours",
         "standards": ["29 CFR 1910.331"], "gracePeriod": 30},
        {"name": "Arc Flash Safety", "criticality": "high", "duration": "4 hours",
         "standards": ["NFPA 70E"], "gracePeriod": 45},
    ],
    "Warehouse": [
        {"name": "Forklift Operation", "criticality": "critical", "duration": "8 hours",
         "standards": ["29 CFR 1910.178"], "gracePeriod": 30},
        {"name": "Material Handling", "criticality": "medium", "duration": "4 hours",
         "standards": ["29 CFR 1910.176"], "gracePeriod": 60},
        {"name": "Ergonomics", "criticality": "medium", "duration": "2 hours",
         "standards": ["Guidelines"], "gracePeriod": 90},
    ],
}


def default_catalog() -> RequirementCatalog:
    """Build the bundled catalog; a fresh value on every call"""
    return RequirementCatalog.from_table(DEFAULT_CATALOG_VERSION, DEPARTMENT_REQUIREMENTS)


if __name__ == "__main__":
    catalog = default_catalog()
    print(f"Requirement catalog {catalog.version}")
    for department in catalog.departments:
        print(f"\n{department}:")
        for requirement in catalog.requirements_for(department):
            print(f"  {requirement.certification} ({requirement.criticality.value}, "
                  f"{requirement.grace_period_days} day grace)")
