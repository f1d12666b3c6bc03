#!/usr/bin/env python3
"""Tests for the part catalog."""

import pytest

from fleetparts import CatalogError, PartCatalog, PartDefinition, Rule, default_catalog, load_catalog
from fleetparts.catalog import FALLBACK_RULE, catalog_from_dict


class TestDefaultCatalog:
    """Tests for the bundled catalog."""

    def test_display_order(self):
        names = default_catalog().names
        assert names[:7] == [
            "oil_service",
            "timing_belt",
            "water_pump",
            "accessory_belt",
            "suspension_diagnostic",
            "wheel_alignment",
            "caliper_service",
        ]
        assert names[-1] == "spark_plugs"

    def test_titles(self):
        catalog = default_catalog()
        assert catalog.title("timing_belt").startswith("ГРМ (ролики+ремінь)")
        assert catalog.title("unknown") == "unknown"

    def test_keywords(self):
        catalog = default_catalog()
        assert "грм" in catalog.keywords("timing_belt")
        assert catalog.keywords("unknown") == ()

    def test_part_without_rule_uses_default(self):
        catalog = default_catalog()
        assert catalog.get("spark_plugs").rule is None
        assert catalog.rule_for("spark_plugs", 2015, "Skoda") == catalog.default_rule
        assert catalog.rule_for("unknown", 2015, "Skoda") == catalog.default_rule

    def test_round_trip_through_dict(self):
        catalog = default_catalog()
        rebuilt = catalog_from_dict(catalog.to_dict())
        assert rebuilt.parts == catalog.parts
        assert rebuilt.default_rule == catalog.default_rule


class TestLoadCatalog:
    """Tests for loading catalog files."""

    def test_loads_minimal_catalog(self, tmp_path):
        path = tmp_path / "parts.yaml"
        path.write_text(
            """
parts:
  - name: oil
    keywords: [oil]
    rule:
      critical: {atLeast: 10000}
  - name: wipers
    title: Wipers
    keywords: [wiper]
""",
            encoding="utf-8",
        )
        catalog = load_catalog(path)
        assert catalog.names == ["oil", "wipers"]
        assert catalog.title("oil") == "oil"
        assert catalog.default_rule == FALLBACK_RULE
        assert "oil" in catalog
        assert len(catalog) == 2

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "parts.yaml"
        path.write_text("parts:\n  - name: oil\n", encoding="utf-8")
        with pytest.raises(CatalogError, match="keywords"):
            load_catalog(path)

    def test_bad_threshold(self, tmp_path):
        path = tmp_path / "parts.yaml"
        path.write_text(
            "parts:\n  - name: oil\n    keywords: [oil]\n    rule:\n      critical: {over: 5}\n",
            encoding="utf-8",
        )
        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_yaml_error(self, tmp_path):
        path = tmp_path / "parts.yaml"
        path.write_text("parts: [unclosed\n", encoding="utf-8")
        with pytest.raises(CatalogError, match="YAML"):
            load_catalog(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "parts.yaml"
        path.write_text("- oil\n", encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_duplicate_names(self, tmp_path):
        path = tmp_path / "parts.yaml"
        path.write_text(
            "parts:\n  - {name: oil, keywords: [a]}\n  - {name: oil, keywords: [b]}\n",
            encoding="utf-8",
        )
        with pytest.raises(CatalogError, match="Duplicate"):
            load_catalog(path)


class TestPartCatalog:
    """Tests for building catalogs in code."""

    def test_custom_default_rule(self):
        rule = Rule()
        catalog = PartCatalog([PartDefinition("a", "", ("x",))], default_rule=rule)
        assert catalog.rule_for("a", 0, "") is rule

    def test_display_name_falls_back_to_name(self):
        assert PartDefinition("a", "", ()).display_name == "a"
        assert PartDefinition("a", "Alpha", ()).display_name == "Alpha"
