"""Seeded stratified treatment/control assignment for CSV datasets."""

__version__ = "0.1.0"
