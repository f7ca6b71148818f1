"""Allow ``python -m docrun``."""

from docrun.cli import app

app()
