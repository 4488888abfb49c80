#!/usr/bin/env python3
"""
Department Requirement Catalog
Versioned table of the certifications each department must hold, injected
into the engines so alternate catalogs never touch shared state
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.errors import CatalogError
from core.logging import get_logger
from engines.findings import Priority

logger = get_logger(__name__)


class DepartmentRequirement(BaseModel):
    """A certification a department requires of every active member"""

    model_config = ConfigDict(frozen=True)

    department: str
    certification: str
    criticality: Priority
    duration: str
    standards: Tuple[str, ...] = ()
    grace_period_days: int = Field(ge=0)

    @field_validator("certification", "department")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class RequirementCatalog(BaseModel):
    """Immutable department -> requirements mapping with a version tag"""

    model_config = ConfigDict(frozen=True)

    version: str
    requirements: Mapping[str, Tuple[DepartmentRequirement, ...]] = Field(default_factory=dict)

    def requirements_for(self, department: Optional[str]) -> Tuple[DepartmentRequirement, ...]:
        """Requirements for a department; unknown departments require nothing"""
        if not department:
            return ()
        return tuple(self.requirements.get(department, ()))

    @property
    def departments(self) -> List[str]:
        return sorted(self.requirements)

    @classmethod
    def from_table(cls, version: str, table: Mapping[str, List[Dict[str, Any]]]) -> "RequirementCatalog":
        """Build a catalog from the plain table layout used in data files.

        Each department maps to a list of entries with ``name``,
        ``criticality``, ``duration``, ``standards`` and ``gracePeriod``
        (or ``grace_period_days``).
        """
        requirements: Dict[str, Tuple[DepartmentRequirement, ...]] = {}
        for department, entries in table.items():
            requirements[department] = tuple(
                DepartmentRequirement(
                    department=department,
                    certification=entry.get('name') or entry.get('certification', ''),
                    criticality=entry['criticality'],
                    duration=entry.get('duration', ''),
                    standards=tuple(entry.get('standards') or ()),
                    grace_period_days=entry.get('grace_period_days', entry.get('gracePeriod', 0)),
                )
                for entry in entries
            )
        return cls(version=version, requirements=requirements)


def load_catalog(path: Optional[Path] = None) -> RequirementCatalog:
    """Load a catalog from a JSON file, or the bundled default when no path is given.

    The file holds ``{"version": "...", "departments": {"<name>": [entries]}}``.
    """
    if path is None:
        from data.requirements_catalog import default_catalog
        return default_catalog()

    source = str(path)
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Unable to read requirement catalog: {exc}", source=source) from exc

    if not isinstance(payload, dict) or not isinstance(payload.get('departments'), dict):
        raise CatalogError("Requirement catalog must define a 'departments' mapping", source=source)

    try:
        catalog = RequirementCatalog.from_table(str(payload.get('version', 'unversioned')), payload['departments'])
    except (ValidationError, KeyError, TypeError, AttributeError) as exc:
        raise CatalogError(f"Invalid requirement catalog entry: {exc}", source=source) from exc

    logger.info(
        "requirement_catalog_loaded",
        source=source,
        version=catalog.version,
        departments=len(catalog.requirements),
    )
    return catalog


__all__ = ["DepartmentRequirement", "RequirementCatalog", "load_catalog"]
