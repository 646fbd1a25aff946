"""Module entrypoint for running MockingBird as ``python -m mockingbird``."""

from __future__ import annotations

from mockingbird.cli import main


if __name__ == "__main__":
    main()
