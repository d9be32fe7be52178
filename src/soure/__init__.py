"""Soure: authoritative rules engine for a dice-driven territory board game."""

__version__ = "0.1.0"
