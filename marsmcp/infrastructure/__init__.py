"""Infrastructure Layer:

Concrete implementations of the domain interfaces and external adapters
(MARS HTTP client, resilience, config, logging, MCP server, console).
"""
