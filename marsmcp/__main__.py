"""Main entry point when executing marsmcp as a package.

This allows running the package using python -m marsmcp.
"""

from marsmcp.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
