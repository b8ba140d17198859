#!/usr/bin/env python3
"""
eBay Listing Assistant Web App - Main Entry Point
==================================================
Starts the Flask JSON API. Exits immediately if GEMINI_API_KEY is missing.
"""

import os
import sys

from ebay_lister.logging_config import configure_logging
from ebay_lister.web import create_app

configure_logging()

try:
    app = create_app()
except ValueError as e:
    print(f"❌ {e}", flush=True)
    sys.exit(1)


if __name__ == "__main__":
    port = int(os.getenv("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG") == "1")
