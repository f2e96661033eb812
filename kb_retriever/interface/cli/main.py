"""CLI for querying the knowledge retriever and inspecting its index."""

import argparse
import dataclasses
import json
import logging
import sys

from kb_retriever.config.composition import build_retriever
from kb_retriever.config.settings import AppSettings
from kb_retriever.domain.errors import ConfigurationError
from kb_retriever.domain.models import RetrievalResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("kb-retriever", description="Hybrid BM25 + MMR knowledge retrieval")
    parser.add_argument("--question", help="Free-text query to run against the knowledge directory")
    parser.add_argument("--status", action="store_true", help="Print index status and exit")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a text report")
    return parser


def print_result(result: RetrievalResult) -> None:
    if not result.matches:
        print("No matching knowledge snippets.")
        return

    print("\n" + "=" * 80)
    print("MATCHES:")
    print("=" * 80)
    for i, match in enumerate(result.matches, 1):
        m = match.metrics
        print(
            f"[{i}] {match.source} (score={match.score:.3f}; bm25={m.bm25:.3f} "
            f"phrase={m.phrase:.3f} ngram={m.ngram:.3f} coverage={m.coverage:.3f})"
        )
        print(f"    {match.text}")

    print("\n" + "=" * 80)
    print("CITATIONS:")
    print("=" * 80)
    for citation in result.citations:
        print(f"- {citation.source}")

    if result.context_message:
        print("\n" + "=" * 80)
        print("CONTEXT:")
        print("=" * 80)
        print(result.context_message)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if not args.question and not args.status:
        print("Nothing to do: pass --question or --status", file=sys.stderr)
        return 2

    try:
        settings = AppSettings()
    except ConfigurationError as err:
        print(f"[ERROR] {type(err).__name__}: {err}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    retriever = build_retriever(settings)

    if args.status:
        status = retriever.status()
        if args.json:
            print(json.dumps(dataclasses.asdict(status), ensure_ascii=False, indent=2))
        else:
            for key, value in dataclasses.asdict(status).items():
                print(f"{key}: {value}")
        return 0

    result = retriever.retrieve(args.question)
    if args.json:
        print(json.dumps(dataclasses.asdict(result), ensure_ascii=False, indent=2))
    else:
        print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
