"""Tests for the brand asset preview aggregator."""


def _buckets(*records):
    from brandlens.schemas.analysis import RecordBuckets

    return RecordBuckets.from_records(records)


class TestPreviewColors:
    def test_theme_colors_keep_structural(self):
        from brandlens.engine.aggregator import collect_colors
        from brandlens.schemas.analysis import PptxRecord

        pptx = PptxRecord(source="deck.pptx", theme={"colors": [
            {"name": "dk1", "type": "dark", "label": "Dark 1", "value": "#000000"},
            {"name": "accent1", "type": "accent", "label": "Accent 1", "value": "#1a73e8"},
        ]})
        colors = collect_colors(_buckets(pptx))

        assert [(c.hex, c.priority) for c in colors] == [("#000000", 10), ("#1a73e8", 15)]
        assert colors[1].name == "Accent 1"

    def test_slide_colors_are_band_filtered(self):
        from brandlens.engine.aggregator import collect_colors
        from brandlens.schemas.analysis import PptxRecord

        pptx = PptxRecord(source="deck.pptx", patterns={"color_usage": {
            "#ffffff": {"frequency": 20},
            "#ff5733": {"frequency": 42},
        }})
        colors = collect_colors(_buckets(pptx))

        assert [(c.hex, c.source, c.priority) for c in colors] == [("#ff5733", "pptx-slides", 10)]

    def test_dedupe_keeps_highest_priority(self):
        from brandlens.engine.aggregator import deduplicate_colors
        from brandlens.schemas.preview import PreviewColor

        colors = [
            PreviewColor(hex="#ff5733", source="pdf", priority=3),
            PreviewColor(hex="#ff5835", source="logo", priority=12, name="Brand"),
            PreviewColor(hex="#1a73e8", source="pdf", priority=5),
        ]
        unique = deduplicate_colors(colors)

        assert [(c.hex, c.priority, c.name) for c in unique] == [
            ("#ff5733", 12, "Brand"),
            ("#1a73e8", 5, None),
        ]
        # inputs are left untouched
        assert colors[0].priority == 3


class TestPreviewFonts:
    def test_fonts_deduplicated_case_insensitive(self):
        from brandlens.engine.aggregator import collect_fonts, deduplicate_fonts
        from brandlens.schemas.analysis import FontRecord, PptxRecord

        pptx = PptxRecord(source="deck.pptx", theme={"fonts": {
            "major": "Montserrat",
            "minor": "Open Sans",
            "all": [{"name": "Montserrat", "usage": "other"}, {"name": "Arial", "usage": "other"}],
        }})
        font = FontRecord(source="montserrat.ttf", name="montserrat", data_url="data:font/ttf;base64,AA==")
        fonts = deduplicate_fonts(collect_fonts(_buckets(pptx, font)))

        assert [(f.name, f.priority) for f in fonts] == [
            ("Montserrat", 10),
            ("Open Sans", 10),
            ("Arial", 5),
        ]


class TestAggregateExtraction:
    def test_caps_from_config(self):
        from brandlens.config import AnalyzerConfig
        from brandlens.engine import aggregate_extraction
        from brandlens.schemas.analysis import PdfRecord

        samples = [{"hex": f"#{i * 20:02x}4080", "count": i} for i in range(1, 12)]
        pdf = PdfRecord(source="guide.pdf", colors={"dominant": samples})

        preview = aggregate_extraction(_buckets(pdf))
        assert len(preview.colors) == 10

        capped = aggregate_extraction(_buckets(pdf), AnalyzerConfig(preview_max_colors=3))
        assert len(capped.colors) == 3
        assert all(c.priority == 8 for c in capped.colors)

    def test_logos_sorted_by_confidence(self):
        from brandlens.engine import aggregate_extraction
        from brandlens.schemas.analysis import ImageRecord, PptxRecord

        pptx = PptxRecord(source="deck.pptx", extracted_assets={"logos": [
            {"name": "logo1.png", "data": "data:image/png;base64,AA==", "confidence": 0.9},
            {"name": "nodata.png", "confidence": 0.95},
        ]})
        image = ImageRecord(
            source="mark.png",
            properties={"is_likely_logo": True},
            data_url="data:image/png;base64,AA==",
            confidence=0.7,
        )
        preview = aggregate_extraction(_buckets(image, pptx))

        assert [(logo.name, logo.source) for logo in preview.logos] == [
            ("logo1.png", "pptx"),
            ("mark.png", "image"),
        ]

    def test_empty(self):
        from brandlens.engine import aggregate_extraction

        preview = aggregate_extraction(_buckets())
        assert preview.colors == []
        assert preview.fonts == []
        assert preview.logos == []
