"""``python -m termdeck`` opens the console host."""

from termdeck.cli import run

if __name__ == "__main__":
    raise SystemExit(run())
