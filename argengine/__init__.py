"""Dual-modality command argument resolution for Discord bots."""

__version__ = "0.1.0"
