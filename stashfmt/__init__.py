"""stashfmt - compact, token-friendly text rendering for Bitbucket Server API results."""

__version__ = "0.1.0"
