"""Core Application Layer.

Contains the application services and the command handler that orchestrate
tool calls and CLI commands on top of the domain interfaces.
"""
