#!/usr/bin/env python
"""
Thin wrapper script to invoke the semantic_commit_helper CLI.

Running ``python checkupcodes.py`` is equivalent to running the
``checkupcodes`` console script installed via ``pyproject.toml``.
"""

from semantic_commit_helper.cli import main


if __name__ == "__main__":
    main(prog_name="checkupcodes")
