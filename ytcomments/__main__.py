"""Main entry point when executing ytcomments as a package.

This allows running the package using python -m ytcomments.
"""

from ytcomments.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
