"""
Test configuration and fixtures for DyeMatch tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from main import app
from dyematch.services.colors.palette import Palette, PaletteEntry
from dyematch.services.imaging.raster import ImageSurface
from dyematch.services.orchestrator import MatchOrchestrator, get_orchestrator
from dyematch.services.session import SessionStore, get_session_store
from dyematch.utils.metrics import reset_metrics as _reset_metrics


def make_entry(id, name, hex_color, **kwargs):
    entry = PaletteEntry.from_hex(id=id, name=name, hex_color=hex_color, **kwargs)
    assert entry is not None, f"bad fixture color {hex_color}"
    return entry


@pytest.fixture
def primaries_palette():
    """Pure black, white and the RGB/CMY primaries, in a fixed order."""
    return Palette([
        make_entry(1, "Black", "#000000", category="Neutral"),
        make_entry(2, "White", "#FFFFFF", category="Neutral"),
        make_entry(3, "Red", "#FF0000", category="Red"),
        make_entry(4, "Green", "#00FF00", category="Green"),
        make_entry(5, "Blue", "#0000FF", category="Blue"),
        make_entry(6, "Yellow", "#FFFF00", category="Yellow"),
        make_entry(7, "Cyan", "#00FFFF", category="Blue"),
        make_entry(8, "Magenta", "#FF00FF", category="Purple"),
    ])


@pytest.fixture
def dye_palette():
    """Palette exercising every exclusion filter."""
    return Palette([
        make_entry(1, "Snow White", "#E4DFD0", category="Neutral", acquisition="Dye Vendor", item_id=5729),
        make_entry(2, "Soot Black", "#2B2923", category="Neutral", acquisition="Dye Vendor", item_id=5734),
        make_entry(3, "Metallic Red", "#FF1010", category="Special", acquisition="Crafted", item_id=30116),
        make_entry(4, "Dalamud Red", "#781A1A", category="Red", acquisition="Dye Vendor", item_id=5737),
        make_entry(5, "Pastel Blue", "#96A4D9", category="Blue", acquisition="Crafted", item_id=8737),
        make_entry(6, "Royal Blue", "#273067", category="Blue", acquisition="Dye Vendor", item_id=5797),
        make_entry(7, "Dark Green", "#152C2C", category="Green", acquisition="Crafted", item_id=8736),
        make_entry(8, "Hunter Green", "#284B2C", category="Green", acquisition="Dye Vendor", item_id=5778),
        make_entry(9, "Neon Green", "#12F21A", category="Green", acquisition="Cosmic Exploration", item_id=48166),
        make_entry(10, "Jet Black", "#0A0A0A", category="Special", acquisition="Market Board", item_id=13115),
        make_entry(11, "Pure White", "#F9F8F4", category="Special", acquisition="Market Board", item_id=13114),
    ])


@pytest.fixture
def orchestrator(dye_palette):
    return MatchOrchestrator(palette=dye_palette, expensive_ids=[13114, 13115])


@pytest.fixture
def session_store():
    return SessionStore(limit=4)


@pytest.fixture
def test_client(orchestrator, session_store):
    """Create test client with an isolated palette and session store."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_session_store] = lambda: session_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    _reset_metrics()


def quadrant_image(size=40, alpha=255):
    """Square RGBA image: red, green, blue and white quadrants."""
    half = size // 2
    rgba = np.zeros((size, size, 4), dtype=np.uint8)
    rgba[:half, :half] = (255, 0, 0, alpha)
    rgba[:half, half:] = (0, 255, 0, alpha)
    rgba[half:, :half] = (0, 0, 255, alpha)
    rgba[half:, half:] = (255, 255, 255, alpha)
    return rgba


def png_bytes(rgba):
    buffer = io.BytesIO()
    Image.fromarray(rgba).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def quadrant_surface():
    return ImageSurface(quadrant_image())


@pytest.fixture
def quadrant_png():
    return png_bytes(quadrant_image())
