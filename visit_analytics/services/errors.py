"""
Error types raised by the aggregation engine.

The engine raises; it never logs or swallows. Translating these into HTTP
responses is the job of the API layer (api/analytics.py).
"""


class InvalidArgument(ValueError):
    """
    Malformed input to an aggregation query.

    Raised for an unrecognized range kind, an unparseable date, or a negative
    total where a count is structurally required. Subclasses ValueError so
    callers that already guard enum/date parsing with `except ValueError`
    keep working.
    """
