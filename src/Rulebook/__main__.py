"""Allow ``python -m Rulebook``."""

from .cli import run

if __name__ == "__main__":
    run()
