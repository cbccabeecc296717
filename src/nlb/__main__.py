"""`python -m nlb` entry point."""

from nlb.cli.main import run

if __name__ == "__main__":
    run()
