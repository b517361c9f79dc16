"""ytcomments: concurrent, rate-limited YouTube comment fetcher."""

__version__ = "1.0.0"
