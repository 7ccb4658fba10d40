"""Greenhouse control: adjustable targets, a dashboard link, relay, LED and servo actuators, and climate control loops."""

__version__ = "0.1.0"