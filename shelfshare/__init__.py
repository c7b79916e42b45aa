"""ShelfShare Application Package — peer-to-peer book lending API.

Invariants:
    - Importing the package has no side effects; only the version is defined here
"""

__version__ = "1.0.0"
