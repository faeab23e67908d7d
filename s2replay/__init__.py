"""Tagged value decoding, tracker event models, replay state and flat rows for StarCraft II replays."""

__version__ = "0.1.0"

__all__ = ["decoder", "unit_props", "unit_cmd", "events", "state", "flat_rows", "iterator"]