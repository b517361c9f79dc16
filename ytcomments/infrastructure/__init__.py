"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to the outside world (the YouTube API, the file
system, the terminal) by implementing the interfaces defined in the domain
layer. Also holds the resilience services (rate limiting, retries).
"""
