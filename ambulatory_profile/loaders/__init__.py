"""Loaders for externally supplied payloads."""

from ambulatory_profile.loaders.payload import BiomarkerPayload, RangeConfigPayload, load_json

__all__ = ["BiomarkerPayload", "RangeConfigPayload", "load_json"]
