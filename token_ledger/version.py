"""
Version of the token_ledger package.

Can be overridden at build time with the env var TOKEN_LEDGER_VERSION.
This file has *no* third-party deps and is safe to import anywhere.
"""

from __future__ import annotations

import os

__version__ = os.getenv("TOKEN_LEDGER_VERSION", "0.1.0")

__all__ = ["__version__"]
