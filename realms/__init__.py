"""Realms rules engine package.

Pure rules/formula functions, part-cost calculators and the character
enrichment/save layers, plus a thin FastAPI surface over them. The engine
modules never perform I/O; codex data is loaded once through the codex
cache in ``modules.rules_pkg.data_loader`` and handed to the calculators.
"""

from . import shared, modules

__all__ = ["shared", "modules"]
