"""DyeMatch: match colors and image samples against a fixed dye palette."""

__version__ = "1.0.0"
