"""Skaya -- project scaffolding and component generation.

Generates frontend, backend and blockchain components from bundled templates
or an AI completion provider, and records them (with their import
relationships) in ``skaya.config.json``.
"""

__version__ = "0.1.0"
