"""Guidenav - multilingual collapsible navigation for developer guides."""

__version__ = "0.1.0"
