"""Allow ``python -m skaya``."""

from .cli import main

main()
