"""Module entrypoint for running ebookforge as ``python -m ebookforge``."""

from __future__ import annotations

from ebookforge.cli import main


if __name__ == "__main__":
    main()
