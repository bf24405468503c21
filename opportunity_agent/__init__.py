"""Top-level package for the news-to-market opportunity agent.

This package contains the application entrypoint and all supporting modules
for ingesting news feeds, scoring and deduplicating items, generating market
opportunities and handing them to the market-creation service.
"""

__all__ = []
