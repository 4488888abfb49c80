import json

import pytest

from core.errors import CatalogError
from data.requirements_catalog import DEFAULT_CATALOG_VERSION, default_catalog
from engines.catalog import load_catalog
from engines.findings import Priority


def test_default_catalog_contents():
    catalog = default_catalog()

    assert catalog.version == DEFAULT_CATALOG_VERSION
    assert catalog.departments == ["Construction", "Maintenance", "Manufacturing", "Warehouse"]
    names = [r.certification for r in catalog.requirements_for("Manufacturing")]
    assert names == ["Machine Guarding", "Lockout/Tagout", "Hearing Conservation"]
    assert catalog.requirements_for("Unknown") == ()
    assert catalog.requirements_for(None) == ()


def test_default_catalog_is_a_fresh_value():
    assert default_catalog() is not default_catalog()
    assert load_catalog() == default_catalog()


def test_load_catalog_from_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({
        "version": "2025.2",
        "departments": {
            "Laboratory": [
                {"certification": "Chemical Hygiene", "criticality": "high", "duration": "3 hours",
                 "standards": ["29 CFR 1910.1450"], "grace_period_days": 21},
            ],
        },
    }))

    catalog = load_catalog(path)

    [requirement] = catalog.requirements_for("Laboratory")
    assert catalog.version == "2025.2"
    assert requirement.criticality == Priority.HIGH
    assert requirement.grace_period_days == 21
    assert requirement.standards == ("29 CFR 1910.1450",)


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"version": "x"}),
        json.dumps({"departments": {"Lab": [{"name": "Chem", "criticality": "urgent", "gracePeriod": 5}]}}),
        json.dumps({"departments": {"Lab": [{"name": "Chem", "criticality": "low", "gracePeriod": -1}]}}),
        json.dumps({"departments": {"Lab": [{"name": "  ", "criticality": "low", "gracePeriod": 1}]}}),
    ],
)
def test_invalid_catalog_raises_catalog_error(tmp_path, content):
    path = tmp_path / "catalog.json"
    path.write_text(content)

    with pytest.raises(CatalogError) as excinfo:
        load_catalog(path)

    assert excinfo.value.source == str(path)
    assert excinfo.value.error_code == "CATALOG_INVALID"


def test_missing_catalog_file(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(tmp_path / "absent.json")
