"""YouTube adapters: locator parsing and the Data API v3 comment source."""
