"""Wild Horizons: a JSON-document data layer with two small HTTP demos.

The package is split into:

- ``wildhorizons.core``: the document store, the query validator and the
  filter engine (no web dependencies).
- ``wildhorizons.api``: the FastAPI application serving the destinations
  catalog and the sightings log.
- ``wildhorizons.cli``: the Typer command line.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
