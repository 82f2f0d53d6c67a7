"""Merge an enriched providers file onto data/providers.json.

Usage:
  python scripts/merge_providers.py --enriched data/providers.enriched.json --out data/providers.final.json

Curated fields always come from the base file; lat/lng are replaced with the
Places location only when --overwrite-geo is given.
"""

import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from provider_enrichment.cli import merge_main

if __name__ == "__main__":
    sys.exit(merge_main())
