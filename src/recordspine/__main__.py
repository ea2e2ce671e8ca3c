"""Allow ``python -m recordspine``."""

from recordspine.cli.app import app

if __name__ == "__main__":
    app()
