"""Allow ``python -m burpless``."""

from burpless.cli import cli

if __name__ == "__main__":
    cli()
