"""Tests for chrono_tags.catalog.loader: YAML / mapping documents."""

from __future__ import annotations

from pathlib import Path

import pytest

from chrono_tags.catalog import DEFAULT_TAGS, Deadline, Elapsed, RuleCatalog
from chrono_tags.core.enums import TagCategory
from chrono_tags.core.errors import CatalogError

CATALOG_YAML = """
tags:
  - id: newcomer
    name: Recém-chegado
    category: time
    acquisition:
      conditions:
        - {kind: elapsed, metric: created_at, op: "<=", days: 7}
    removal:
      conditions:
        - {kind: elapsed, metric: created_at, op: ">", days: 7}
  - id: verified
    name: Verificado
    category: positive
    acquisition: {manual: true}
    removal: {manual: true}
    notify_on_acquire: true
  - id: silenced
    name: Silenciado
    category: moderation
    visibility: internal
    acquisition:
      conditions:
        - {kind: deadline, metric: silenced_until}
    notify_on_remove: true
"""


class TestFromMapping:
    def test_builds_dataclasses_in_order(self):
        catalog = RuleCatalog.from_mapping(
            {
                "tags": [
                    {
                        "id": "popular",
                        "name": "Popular",
                        "category": "positive",
                        "acquisition": {
                            "conditions": [
                                {"kind": "comparison", "metric": "reactions_received", "op": ">=", "value": 5000}
                            ]
                        },
                    },
                    {
                        "id": "founder",
                        "name": "Fundador",
                        "category": "time",
                        "acquisition": {"conditions": [{"kind": "flag", "metric": "overrides.founder"}]},
                    },
                ]
            }
        )
        assert [d.id for d in catalog.list_definitions()] == ["popular", "founder"]
        assert catalog.get("popular").category is TagCategory.POSITIVE
        assert catalog.get("founder").removal is None

    def test_unknown_condition_kind_rejected(self):
        with pytest.raises(CatalogError, match="Invalid catalog document"):
            RuleCatalog.from_mapping(
                {
                    "tags": [
                        {
                            "id": "x",
                            "name": "X",
                            "category": "positive",
                            "acquisition": {"conditions": [{"kind": "regex", "metric": "x"}]},
                        }
                    ]
                }
            )

    def test_free_form_string_condition_rejected(self):
        with pytest.raises(CatalogError):
            RuleCatalog.from_mapping(
                {
                    "tags": [
                        {
                            "id": "x",
                            "name": "X",
                            "category": "time",
                            "acquisition": {"tempo_desde_criacao": "<= 7 dias"},
                        }
                    ]
                }
            )

    def test_empty_automatic_predicate_rejected(self):
        with pytest.raises(CatalogError, match="at least one condition"):
            RuleCatalog.from_mapping(
                {"tags": [{"id": "x", "name": "X", "category": "positive", "acquisition": {}}]}
            )

    def test_unknown_metric_rejected(self):
        with pytest.raises(CatalogError, match="Unknown metric"):
            RuleCatalog.from_mapping(
                {
                    "tags": [
                        {
                            "id": "x",
                            "name": "X",
                            "category": "style",
                            "acquisition": {
                                "conditions": [{"kind": "comparison", "metric": "posts_com_humor", "op": ">=", "value": 50}]
                            },
                        }
                    ]
                }
            )


class TestFromYaml:
    def test_load_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(CATALOG_YAML, encoding="utf-8")

        catalog = RuleCatalog.from_yaml(path)

        assert len(catalog) == 3
        newcomer = catalog.get("newcomer")
        assert newcomer.acquisition.conditions == (Elapsed("created_at", "<=", 7),)
        assert catalog.get("verified").manual_acquisition
        assert catalog.get("silenced").acquisition.conditions == (Deadline("silenced_until", True),)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="Cannot read catalog"):
            RuleCatalog.from_yaml(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(CatalogError, match="must be a mapping"):
            RuleCatalog.from_yaml(path)

    def test_shipped_example_matches_builtin_catalog(self):
        path = Path(__file__).parents[2] / "examples" / "catalog.yaml"

        catalog = RuleCatalog.from_yaml(path)

        assert catalog.list_definitions() == tuple(DEFAULT_TAGS)
