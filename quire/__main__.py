"""Entry point for the Quire CLI when run as ``python -m quire``."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
