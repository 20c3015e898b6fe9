"""
Dye palette loading and lookup.

The palette is loaded once from JSON, every entry's RGB and HSV are derived at
load time, and the resulting collection is treated as read-only for the
lifetime of the process.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Union

from loguru import logger

from .conversions import HSVColor, RGBColor, hex_to_rgb, rgb_to_hex, rgb_to_hsv

DEFAULT_PALETTE_PATH = Path(__file__).resolve().parents[2] / "data" / "dyes.json"

SORT_KEYS = {
    "hue": lambda entry: entry.hsv.h,
    "saturation": lambda entry: entry.hsv.s,
    "brightness": lambda entry: entry.hsv.v,
}


class PaletteLoadError(RuntimeError):
    """Raised when a palette file cannot be read or yields no usable entries."""


@dataclass(frozen=True)
class PaletteEntry:
    """A single dye with its precomputed color representations."""
    id: int
    name: str
    hex: str
    rgb: RGBColor
    hsv: HSVColor
    category: str = ""
    acquisition: str = ""
    item_id: Optional[int] = None
    cost: int = 0
    tags: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_hex(
        cls,
        id: int,
        name: str,
        hex_color: str,
        category: str = "",
        acquisition: str = "",
        item_id: Optional[int] = None,
        cost: int = 0,
        tags: Iterable[str] = (),
    ) -> Optional["PaletteEntry"]:
        """
        Build an entry from a hex color, deriving RGB and HSV once.

        Category and acquisition are folded into the tag set so exclusion
        filters can address them uniformly.

        Returns:
            PaletteEntry, or None if the hex color is malformed
        """
        rgb = hex_to_rgb(hex_color)
        if rgb is None:
            return None
        all_tags = set(tags)
        if category:
            all_tags.add(category)
        if acquisition:
            all_tags.add(acquisition)
        return cls(
            id=id,
            name=name,
            hex=rgb_to_hex(rgb),
            rgb=rgb,
            hsv=rgb_to_hsv(rgb),
            category=category,
            acquisition=acquisition,
            item_id=item_id,
            cost=cost,
            tags=frozenset(all_tags),
        )


class Palette:
    """Ordered, immutable collection of dyes with id and name lookups."""

    def __init__(self, entries: Sequence[PaletteEntry]):
        self._entries = tuple(entries)
        self._by_id: Dict[int, PaletteEntry] = {}
        for entry in self._entries:
            self._by_id[entry.id] = entry
            if entry.item_id is not None:
                self._by_id.setdefault(entry.item_id, entry)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Sequence[PaletteEntry]:
        return self._entries

    def get_by_id(self, dye_id: int) -> Optional[PaletteEntry]:
        """Look up a dye by its id or item id."""
        return self._by_id.get(dye_id)

    def get_by_ids(self, dye_ids: Iterable[int]) -> List[PaletteEntry]:
        """Look up several dyes, silently dropping unknown ids."""
        return [self._by_id[dye_id] for dye_id in dye_ids if dye_id in self._by_id]

    def search_by_name(self, query: str) -> List[PaletteEntry]:
        """Case-insensitive substring search; an empty query matches nothing."""
        needle = query.lower().strip()
        if not needle:
            return []
        return [entry for entry in self._entries if needle in entry.name.lower()]

    def by_category(self, category: str) -> List[PaletteEntry]:
        wanted = category.lower()
        return [entry for entry in self._entries if entry.category.lower() == wanted]

    def categories(self) -> List[str]:
        return sorted({entry.category for entry in self._entries if entry.category})

    def sorted_by(self, key: str, ascending: bool = True) -> List[PaletteEntry]:
        """
        Return entries sorted by an HSV component.

        Args:
            key: "hue", "saturation" or "brightness"
            ascending: Sort direction

        Raises:
            ValueError: If the sort key is unknown
        """
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        return sorted(self._entries, key=SORT_KEYS[key], reverse=not ascending)


def parse_entries(records: Iterable[Dict[str, Any]]) -> List[PaletteEntry]:
    """Convert raw JSON records into palette entries, skipping bad colors."""
    entries = []
    for record in records:
        entry = PaletteEntry.from_hex(
            id=int(record["id"]),
            name=str(record["name"]),
            hex_color=str(record.get("hex", "")),
            category=str(record.get("category", "")),
            acquisition=str(record.get("acquisition", "")),
            item_id=record.get("itemID"),
            cost=int(record.get("cost", 0)),
            tags=record.get("tags", ()),
        )
        if entry is None:
            logger.warning(f"Skipping dye {record.get('name')!r}: invalid hex {record.get('hex')!r}")
            continue
        entries.append(entry)
    return entries


def load_palette(path: Union[str, Path, None] = None) -> Palette:
    """
    Load a palette from a JSON file.

    The file holds either a list of dye records or an object whose values are
    dye records.

    Args:
        path: JSON file path; defaults to the bundled dye list

    Returns:
        Loaded Palette

    Raises:
        PaletteLoadError: If the file is missing, malformed or has no valid dyes
    """
    palette_path = Path(path) if path else DEFAULT_PALETTE_PATH
    try:
        raw = json.loads(palette_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PaletteLoadError(f"Failed to load dye database: {e}") from e

    records = raw if isinstance(raw, list) else list(raw.values())
    try:
        entries = parse_entries(records)
    except (KeyError, TypeError, ValueError) as e:
        raise PaletteLoadError(f"Invalid dye database format: {e}") from e

    if not entries:
        raise PaletteLoadError("Invalid dye database format: no dyes found")

    logger.info(f"Dye database loaded: {len(entries)} dyes from {palette_path.name}")
    return Palette(entries)
