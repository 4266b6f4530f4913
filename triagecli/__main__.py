"""Main entry point when executing triagecli as a package.

This allows running the package using python -m triagecli.
"""

from triagecli.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
