"""Entry point for running trimwire as a module."""

from trimwire.cli.commands import app

if __name__ == "__main__":
    app()
