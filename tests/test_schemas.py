"""Tests for the record, rule and config models."""

import pytest
from pydantic import ValidationError


class TestAnalysisRecords:
    def test_discriminated_union(self):
        from brandlens.schemas.analysis import (
            ImageRecord,
            PptxRecord,
            TokensRecord,
            analysis_record_adapter,
        )

        assert isinstance(
            analysis_record_adapter.validate_python({"type": "potx", "source": "t.potx"}),
            PptxRecord,
        )
        assert isinstance(
            analysis_record_adapter.validate_python({"type": "image", "source": "a.png"}),
            ImageRecord,
        )
        assert isinstance(
            analysis_record_adapter.validate_python({"type": "tokens", "source": "t.json"}),
            TokensRecord,
        )
        with pytest.raises(ValidationError):
            analysis_record_adapter.validate_python({"type": "docx", "source": "a.docx"})

    def test_partial_record_defaults(self):
        from brandlens.schemas.analysis import PptxRecord

        record = PptxRecord(source="deck.pptx")
        assert record.theme.colors == []
        assert record.layouts.slide_size is None
        assert record.patterns.grid_base is None
        assert record.extracted_assets.is_empty()

    def test_buckets_route_by_type(self):
        from brandlens.schemas.analysis import (
            ImageRecord,
            PptxRecord,
            RecordBuckets,
            TokensRecord,
        )

        buckets = RecordBuckets.from_records([
            PptxRecord(source="a.pptx"),
            PptxRecord(source="b.potx", type="potx"),
            ImageRecord(source="c.png"),
            TokensRecord(source="d.json"),
        ])
        assert [r.source for r in buckets.pptx] == ["a.pptx", "b.potx"]
        assert [r.source for r in buckets.all_records()] == ["a.pptx", "b.potx", "c.png", "d.json"]
        assert not buckets.is_empty()


class TestRuleSchema:
    def _rule(self):
        from brandlens.schemas.rules import ColorValue, Provenance, Rule, RuleCategory

        return Rule(
            id="rule-1",
            category=RuleCategory.COLOR,
            name="Primary color",
            description="#ff5733 is used as the main brand color",
            confidence=0.9,
            sources=(Provenance(file="t.json", location="design-tokens"),),
            value=ColorValue(type="primary", color="#ff5733"),
        )

    def test_defaults(self):
        from brandlens.schemas.rules import MediaTag

        rule = self._rule()
        assert rule.applicable_to == (MediaTag.ALL,)
        assert rule.value.kind == "color"

    def test_rules_are_frozen(self):
        rule = self._rule()
        with pytest.raises(ValidationError):
            rule.confidence = 0.1

    def test_confidence_bounds(self):
        from brandlens.schemas.rules import ContentMarginValue, Rule, RuleCategory

        with pytest.raises(ValidationError):
            Rule(
                id="r", category=RuleCategory.SPACING, name="Content margins",
                description="x", confidence=1.5, value=ContentMarginValue(margin=8),
            )

    def test_value_union_from_dict(self):
        from brandlens.schemas.rules import GridValue, Rule

        rule = Rule.model_validate({
            "id": "r", "category": "spacing", "name": "Grid system", "description": "x",
            "confidence": 0.7,
            "value": {"kind": "grid", "base_unit": 8, "scale": [8, 16]},
        })
        assert isinstance(rule.value, GridValue)
        assert rule.value.scale == (8, 16)


class TestAnalyzerConfig:
    def test_defaults(self):
        from brandlens.config import AnalyzerConfig

        config = AnalyzerConfig()
        assert config.confirmed_threshold == 0.6
        assert config.review_threshold == 0.3
        assert config.max_pdf_pages == 5
        assert config.preview_max_colors == 10

    def test_yaml_roundtrip(self, tmp_path):
        from brandlens.config import AnalyzerConfig

        config = AnalyzerConfig(confirmed_threshold=0.7, image_max_dimension=200)
        path = tmp_path / "config.yaml"
        config.to_yaml(path)
        assert AnalyzerConfig.from_yaml(path) == config

    def test_partial_yaml(self, tmp_path):
        from brandlens.config import AnalyzerConfig

        path = tmp_path / "config.yaml"
        path.write_text("max_pdf_pages: 2\n")
        config = AnalyzerConfig.from_yaml(path)
        assert config.max_pdf_pages == 2
        assert config.confirmed_threshold == 0.6

    def test_missing_file(self, tmp_path):
        from brandlens.config import AnalyzerConfig

        with pytest.raises(FileNotFoundError):
            AnalyzerConfig.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_thresholds(self):
        from brandlens.config import AnalyzerConfig

        with pytest.raises(ValidationError):
            AnalyzerConfig(confirmed_threshold=0.2, review_threshold=0.5)
        with pytest.raises(ValidationError):
            AnalyzerConfig(max_pdf_pages=0)
