"""
Container for the realms domain modules.

`rules` serves the formula library and the part calculators; `character`
serves enrichment, save cleaning and derived stats.
"""
from typing import List


def get_routers() -> List:
    """
    Returns the APIRouters of every module, for mounting on an app.

    Imports are performed lazily so that importing the engine packages
    does not pull in FastAPI.
    """
    from . import rules, character

    return [rules.router, character.router]
