"""Allow `python -m flowguard`."""

from flowguard.cli import run

if __name__ == "__main__":
    run()
