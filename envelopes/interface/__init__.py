"""Mini README: Interactive interfaces for the envelopes ledger.

Exports the FastAPI application factory that serves a budget as JSON. The
command line entry point lives in ``main_budget_centre.py`` at the
repository root.
"""

from .web_app import create_application

__all__ = ["create_application"]
