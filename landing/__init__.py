"""Bilingual landing site: content store, admin editor and lead capture API."""

__version__ = "0.3.0"
