"""Enrich data/providers.json with Google Places identity.

Usage:
  python scripts/enrich_places.py --out data/providers.enriched.json --country-bias=PH,TH

Requires MAPS_SERVER_API_KEY in the environment. Records that already carry a
place id are skipped unless --force is given.
"""

import os
import sys

# ensure project root is on sys.path so `import provider_enrichment` works
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from provider_enrichment.cli import enrich_main

if __name__ == "__main__":
    sys.exit(enrich_main())
