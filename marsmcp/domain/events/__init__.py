"""Domain Event definitions.

Represents significant occurrences during an upstream call (attempts,
retries, deferrals) that observers such as the logger can react to.
"""
