"""
Core utilities shared across the blog API.

This package hosts configuration, the error taxonomy, the JSON envelope,
password/token hashing and the adapters for cross-cutting concerns (file
storage, mail, caching, rate limiting). Routers and repositories depend on
these primitives instead of reading os.environ or touching the disk directly.
"""
