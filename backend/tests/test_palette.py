"""
Unit tests for palette loading and lookups.
"""

import json

import pytest

from dyematch.services.colors.conversions import HSVColor, RGBColor
from dyematch.services.colors.palette import (
    DEFAULT_PALETTE_PATH, PaletteEntry, PaletteLoadError, load_palette, parse_entries
)


def write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestLoadPalette:
    """Test reading palettes from JSON"""

    def test_bundled_palette(self):
        palette = load_palette()
        assert DEFAULT_PALETTE_PATH.exists()
        assert len(palette) >= 40
        assert palette.get_by_id(1).name == "Snow White"
        assert "Neutral" in palette.categories()

    def test_list_format(self, tmp_path):
        path = write_json(tmp_path / "dyes.json", [
            {"id": 1, "name": "Red", "hex": "#ff0000", "category": "Red"},
            {"id": 2, "name": "Blue", "hex": "0000FF"},
        ])
        palette = load_palette(path)

        assert len(palette) == 2
        red = palette.get_by_id(1)
        assert red.hex == "#FF0000"
        assert red.rgb == RGBColor(255, 0, 0)
        assert red.hsv == HSVColor(0, 100, 100)
        assert palette.get_by_id(2).hex == "#0000FF"

    def test_dict_format(self, tmp_path):
        path = write_json(tmp_path / "dyes.json", {
            "red": {"id": 1, "name": "Red", "hex": "#FF0000"},
        })
        assert load_palette(path).get_by_id(1).name == "Red"

    def test_invalid_hex_is_skipped(self, tmp_path):
        path = write_json(tmp_path / "dyes.json", [
            {"id": 1, "name": "Broken", "hex": "#XYZ"},
            {"id": 2, "name": "Red", "hex": "#FF0000"},
        ])
        palette = load_palette(path)
        assert [entry.name for entry in palette] == ["Red"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(PaletteLoadError):
            load_palette(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "dyes.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PaletteLoadError):
            load_palette(path)

    def test_no_usable_entries(self, tmp_path):
        with pytest.raises(PaletteLoadError):
            load_palette(write_json(tmp_path / "empty.json", []))
        with pytest.raises(PaletteLoadError):
            load_palette(write_json(tmp_path / "bad.json", [{"id": 1, "name": "X", "hex": "nope"}]))

    def test_record_missing_fields(self, tmp_path):
        with pytest.raises(PaletteLoadError):
            load_palette(write_json(tmp_path / "dyes.json", [{"hex": "#FF0000"}]))


class TestPaletteEntry:
    """Test entry construction"""

    def test_from_hex_invalid(self):
        assert PaletteEntry.from_hex(1, "Bad", "#12") is None

    def test_parse_entries_reads_item_id_and_tags(self):
        entries = parse_entries([{
            "id": 7, "itemID": 5735, "name": "Rose Pink", "hex": "#E69F96",
            "category": "Red", "acquisition": "Dye Vendor", "cost": 216, "tags": ["starter"],
        }])
        entry = entries[0]
        assert entry.item_id == 5735
        assert entry.cost == 216
        assert entry.tags == frozenset({"starter", "Red", "Dye Vendor"})


class TestPaletteLookups:
    """Test lookups and sorting"""

    def test_get_by_id_and_item_id(self, dye_palette):
        assert dye_palette.get_by_id(10).name == "Jet Black"
        assert dye_palette.get_by_id(13115).name == "Jet Black"
        assert dye_palette.get_by_id(999) is None

    def test_get_by_ids_drops_unknown(self, dye_palette):
        found = dye_palette.get_by_ids([1, 999, 2])
        assert [entry.name for entry in found] == ["Snow White", "Soot Black"]

    def test_search_by_name(self, dye_palette):
        names = [entry.name for entry in dye_palette.search_by_name("BLUE")]
        assert names == ["Pastel Blue", "Royal Blue"]
        assert dye_palette.search_by_name("   ") == []

    def test_by_category(self, dye_palette):
        names = [entry.name for entry in dye_palette.by_category("green")]
        assert names == ["Dark Green", "Hunter Green", "Neon Green"]

    def test_categories_sorted(self, dye_palette):
        assert dye_palette.categories() == ["Blue", "Green", "Neutral", "Red", "Special"]

    def test_sorted_by(self, dye_palette):
        hues = [entry.hsv.h for entry in dye_palette.sorted_by("hue")]
        assert hues == sorted(hues)

        values = [entry.hsv.v for entry in dye_palette.sorted_by("brightness", ascending=False)]
        assert values == sorted(values, reverse=True)

    def test_unknown_sort_key(self, dye_palette):
        with pytest.raises(ValueError):
            dye_palette.sorted_by("name")
