"""Newsdesk — post publication workflow for the news content platform."""

__version__ = "0.1.0"
