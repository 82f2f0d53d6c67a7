"""CLI for enriching, merging and looking up provider datasets.

  provider-pipeline enrich --out data/providers.enriched.json --country-bias=PH,TH
  provider-pipeline merge --enriched data/providers.enriched.json --out data/providers.final.json
  provider-pipeline find "dental manila"

`enrich-places` and `merge-providers` run the first two subcommands directly.
Both tools read their whole input up front and write their output once at the
end; an interrupted run leaves nothing behind and can simply be rerun.
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from .config import load_settings
from .enricher import ProviderEnricher
from .errors import EnrichmentError
from .indexer import ProviderIndexer
from .merger import merge_providers
from .places import PlacesClient
from .records import dumps_providers, load_providers, write_providers

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_PATH = os.path.join("data", "providers.json")
DEFAULT_FINAL_PATH = os.path.join("data", "providers.final.json")


def _resolve(path: str) -> str:
    return path if os.path.isabs(path) else os.path.join(os.getcwd(), path)


def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [v.strip() for v in value.split(",") if v.strip()]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(name)s] %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def cmd_enrich(args) -> int:
    # credential first: nothing is read or requested without it
    settings = load_settings()
    in_path = _resolve(args.in_path)
    out_path = _resolve(args.out)

    providers = load_providers(in_path)
    only = _split_csv(args.only)
    if args.overwrite_geo:
        LOGGER.debug("--overwrite-geo is applied by the merge step; enrichment never touches lat/lng")

    delay = settings.delay_seconds if args.delay is None else args.delay
    with PlacesClient(
        settings.api_key, timeout=settings.timeout_seconds, max_results=settings.max_results
    ) as client:
        enricher = ProviderEnricher(
            client,
            country_bias=args.country_bias,
            only=only,
            force=args.force,
            delay_seconds=delay,
        )
        out = enricher.enrich(providers)

    stats = enricher.stats
    LOGGER.info(
        "enriched=%d unchanged=%d skipped=%d requests=%d",
        stats.enriched,
        stats.unchanged,
        stats.skipped,
        client.request_count,
    )
    if stats.failed_ids:
        LOGGER.warning("not enriched, retry with: --only %s", ",".join(stats.failed_ids))

    if args.dry_run:
        sys.stdout.write(dumps_providers(out))
        return 0

    write_providers(out_path, out)
    print(f"[enrich] wrote {len(out)} records -> {out_path}")
    return 0


def cmd_merge(args) -> int:
    base_path = _resolve(args.base)
    enriched_path = _resolve(args.enriched)
    out_path = _resolve(args.out)

    base = load_providers(base_path)
    enriched = load_providers(enriched_path, validate=False)
    merged = merge_providers(base, enriched, overwrite_geo=args.overwrite_geo)

    write_providers(out_path, merged)
    print(f"[merge] wrote {len(merged)} providers -> {out_path}")
    return 0


def cmd_find(args) -> int:
    docs = load_providers(_resolve(args.json))
    indexer = ProviderIndexer()
    indexer.fit(docs)
    for r in indexer.search(args.query, top_k=args.k):
        print(f"[{r['score']:.4f}] {r['id']} - {r['name']} ({r['city']}, {r['country']})")
    return 0


def _add_enrich_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--in", dest="in_path", default=DEFAULT_BASE_PATH, help="Base providers JSON")
    p.add_argument("--out", required=True, help="Output path for the enriched JSON")
    p.add_argument("--country-bias", help="Region code(s), e.g. PH,TH (only the first is sent)")
    p.add_argument("--only", help="Comma-separated provider ids to process")
    p.add_argument("--dry-run", action="store_true", help="Print the result instead of writing it")
    p.add_argument("--overwrite-geo", action="store_true", help="Accepted for symmetry; applied at merge time")
    p.add_argument("--force", action="store_true", help="Re-enrich records that already have a place id")
    p.add_argument("--delay", type=float, help="Seconds to wait between lookups")
    p.add_argument("-v", "--verbose", action="store_true")
    p.set_defaults(func=cmd_enrich)


def _add_merge_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--enriched", required=True, help="Enriched JSON produced by enrich")
    p.add_argument("--out", required=True, help="Output path for the merged JSON")
    p.add_argument("--base", default=DEFAULT_BASE_PATH, help="Base providers JSON")
    p.add_argument("--overwrite-geo", action="store_true", help="Replace lat/lng with gmaps.location")
    p.add_argument("-v", "--verbose", action="store_true")
    p.set_defaults(func=cmd_merge)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("provider-pipeline")
    sub = parser.add_subparsers(dest="cmd")

    _add_enrich_args(sub.add_parser("enrich", help="Resolve Google Places identity"))
    _add_merge_args(sub.add_parser("merge", help="Merge an enriched file onto the base dataset"))

    p_find = sub.add_parser("find", help="Look up providers by free text")
    p_find.add_argument("query", help="Query string")
    p_find.add_argument("--json", default=DEFAULT_FINAL_PATH, help="Providers JSON to search")
    p_find.add_argument("-k", type=int, default=5, help="Number of results")
    p_find.set_defaults(func=cmd_find)
    return parser


def _run(parser: argparse.ArgumentParser, argv: Optional[List[str]], tag: str) -> int:
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # missing or bad flags are fatal configuration errors; --help stays 0
        return 1 if e.code else 0
    if getattr(args, "func", None) is None:
        parser.print_help()
        return 1
    _configure_logging(getattr(args, "verbose", False))
    try:
        return args.func(args)
    except EnrichmentError as e:
        print(f"[{tag}] {e}", file=sys.stderr)
        return 1
    except Exception as e:
        LOGGER.debug("unhandled error", exc_info=True)
        print(f"[{tag}] fatal: {e!r}", file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    return _run(build_parser(), argv, "provider-pipeline")


def enrich_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser("enrich-places")
    _add_enrich_args(parser)
    return _run(parser, argv, "enrich")


def merge_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser("merge-providers")
    _add_merge_args(parser)
    return _run(parser, argv, "merge")


if __name__ == "__main__":
    sys.exit(main())
