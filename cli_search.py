"""Terminal client that reuses the in-process search logic."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable

from catalog_search.config import settings
from catalog_search.errors import SearchError
from catalog_search.importer import load_catalog, load_catalog_file, reload_catalog
from catalog_search.search_service import SearchQuery, SearchService, get_search_service

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def perform_query(service: SearchService, query: str, args: argparse.Namespace) -> dict:
    return service.search_products(
        SearchQuery(
            text=query,
            language=args.lang,
            page=args.page,
            limit=args.limit,
            zones=tuple(args.zone or ()),
            finishes=tuple(args.finish or ()),
        )
    )


def pretty_print_response(query: str, payload: dict) -> None:
    results = payload.get("results", [])
    eta = float(payload.get("took_ms", 0))
    color = GREEN if eta < 200 else RED
    eta_label = f"{color}{eta:.1f} ms{RESET}"
    print(
        f"Query: {query} | normalized: {payload.get('normalized')} | tier: {payload.get('tier')} | "
        f"hits: {payload.get('total')} | page {payload.get('page')}/{payload.get('pages')} | ETA: {eta_label}"
    )
    offset = (payload.get("page", 1) - 1) * payload.get("limit", 0)
    for idx, item in enumerate(results, start=offset + 1):
        print(
            f"  {idx:02d}. sim={item.get('avgSimilarity'):.2f}/{item.get('avgSimilarityWithoutWorst'):.2f} | "
            f"{'*' if item.get('promoted') else ' '} {item.get('code')} | {item.get('name')}"
        )
    if payload.get("zones"):
        print(f"  zones: {', '.join(payload['zones'])}")
    if payload.get("finishes"):
        print(f"  finishes: {', '.join(facet['label'] for facet in payload['finishes'])}")


def run_query(service: SearchService, query: str, args: argparse.Namespace) -> None:
    try:
        response = perform_query(service, query, args)
    except SearchError as exc:
        print(f"{RED}{exc}{RESET}")
        return
    pretty_print_response(query, response)


def interactive_shell(service: SearchService, args: argparse.Namespace) -> None:
    print("Interactive catalog search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if query.lower() in {"exit", "quit"}:
            return
        run_query(service, query, args)


def batch_mode(service: SearchService, file_path: Path, args: argparse.Namespace) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            run_query(service, query, args)


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the catalog search engine")
    parser.add_argument("query", nargs="?", help="Query string. If omitted, starts REPL mode.")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--catalog", type=Path, help="Catalog JSON file (defaults to the configured source)")
    parser.add_argument("--lang", default=settings.default_language, help="Language tag")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--limit", type=int, default=settings.default_page_size)
    parser.add_argument("--zone", action="append", help="Zone filter, repeatable")
    parser.add_argument("--finish", action="append", type=int, help="Finish id filter, repeatable")
    args = parser.parse_args(list(argv) if argv is not None else None)

    service = get_search_service()
    data = load_catalog_file(args.catalog) if args.catalog else load_catalog()
    reload_catalog(service.repository, data)

    if args.batch:
        batch_mode(service, args.batch, args)
        return 0
    if args.query:
        run_query(service, args.query, args)
        return 0
    interactive_shell(service, args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
