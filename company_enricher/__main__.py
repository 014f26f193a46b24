"""CLI entry point for company enrichment."""

import argparse
import asyncio
import csv
import logging
import sys
from pathlib import Path
from typing import Optional

from company_enricher.config import settings
from company_enricher.connectors import CompanyStore, CsvCompanyStore, SqlCompanyStore
from company_enricher.models import EnrichmentReport, EnrichmentResult, EnrichmentRules, load_rules
from company_enricher.pipeline import EnrichmentOrchestrator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def run_enrichment(
    store: CompanyStore,
    rules: EnrichmentRules,
    update: bool = False,
    limit: Optional[int] = None,
    concurrency: Optional[int] = None,
    output_path: Optional[Path] = None,
) -> EnrichmentReport:
    """Run the batch enrichment over a store."""
    logger.info(f"Mode: {'UPDATE' if update else 'PREVIEW ONLY'}")

    async with EnrichmentOrchestrator(rules=rules, concurrency=concurrency) as orchestrator:
        report = await orchestrator.run(store, update=update, limit=limit)

    if update and isinstance(store, CsvCompanyStore):
        enriched_path = store.path.with_name(f"{store.path.stem}_enriched{store.path.suffix}")
        store.save(enriched_path)

    if output_path:
        logger.info(f"Exporting results to {output_path}...")
        export_to_csv(report.results, output_path)
        logger.info(f"Results exported to {output_path}")

    print_summary(report, update=update)
    return report


async def preview_company(name: str, rules: EnrichmentRules) -> EnrichmentResult:
    """Enrich a single company by name without touching any store."""
    async with EnrichmentOrchestrator(rules=rules) as orchestrator:
        result = await orchestrator.enrich_name(name)

    print_result(result)
    return result


def export_to_csv(results: list[EnrichmentResult], output_path: Path):
    """Export per-company results to a CSV file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)

        # Header
        writer.writerow([
            "ID",
            "Name",
            "Found",
            "Wikipedia Title",
            "Score",
            "Confidence",
            "Wikipedia URL",
            "Fields Added",
            "Database Updated",
            "Reason",
        ])

        # Data rows
        for r in results:
            writer.writerow([
                r.company_id if r.company_id is not None else "",
                r.company_name,
                "Yes" if r.found else "No",
                r.match.title if r.match else "",
                f"{r.match.score:.0f}" if r.match else "",
                r.match.confidence.value if r.match else "",
                r.wikipedia_url or "",
                "; ".join(r.fields_added),
                {True: "Yes", False: "No"}.get(r.database_updated, ""),
                r.error or r.reason or "",
            ])


def print_result(result: EnrichmentResult):
    """Print the outcome for a single company."""
    print("\n" + "=" * 60)
    print(result.company_name)
    print("=" * 60)

    if not result.found:
        print(f"\nNot found: {result.error or result.reason}")
        return

    print(f"\nWikipedia: {result.wikipedia_url}")
    if result.match:
        print(f"Match: {result.match.title} ({result.match.confidence.value}, score {result.match.score:.0f})")
    if not result.fields:
        print("No new fields to add")
    for field, value in result.fields.items():
        print(f"   {field}: {value}")


def print_summary(report: EnrichmentReport, update: bool = False):
    """Print a summary of the batch run to console."""
    print("\n" + "=" * 60)
    print("WIKIPEDIA ENRICHMENT REPORT")
    print("=" * 60)

    print(f"\nSuccessfully enriched: {report.found}/{report.total} companies")
    print(f"Failed to enrich: {report.not_found}/{report.total} companies")
    if update:
        print(f"Database updated: {report.updated}/{report.total} companies")

    found = [r for r in report.results if r.found]
    missing = [r for r in report.results if not r.found]

    if found:
        print("\n" + "-" * 60)
        print("SUCCESSFUL ENRICHMENTS")
        print("-" * 60)

        for r in found:
            print(f"\n{r.company_name}")
            print(f"   Wikipedia: {r.wikipedia_url}")
            if r.fields:
                print(f"   Fields added: {', '.join(r.fields_added)}")
            else:
                print("   Fields added: none (already complete)")
            if update and r.fields:
                print(f"   Database: {'Updated' if r.database_updated else 'Failed'}")

    if missing:
        print("\n" + "-" * 60)
        print("NOT FOUND")
        print("-" * 60)

        for r in missing:
            print(f"   {r.company_name}: {r.error or r.reason}")

    if not update:
        print("\nThis was a preview run. Re-run with --update-db to write changes.")

    print("\n" + "=" * 60)


def build_store(source: str, input_path: Optional[Path]) -> CompanyStore:
    """Create the company store selected on the command line."""
    if source == "csv":
        if input_path is None:
            raise ValueError("--input is required with --source csv")
        return CsvCompanyStore(input_path)
    return SqlCompanyStore()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Company Enricher - Fill gaps in company records from Wikipedia"
    )
    parser.add_argument(
        "--source", "-s",
        choices=["db", "csv"],
        default="db",
        help="Where to load companies from (default: db)",
    )
    parser.add_argument(
        "--input", "-i",
        type=Path,
        help="Input CSV path (with --source csv)",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Export per-company results to this CSV path",
    )
    parser.add_argument(
        "--update-db",
        action="store_true",
        help="Write enriched fields back to the store (default: preview only)",
    )
    parser.add_argument(
        "--limit", "-l",
        type=int,
        help="Maximum number of companies to process",
    )
    parser.add_argument(
        "--name", "-n",
        help="Preview enrichment of a single company by name",
    )
    parser.add_argument(
        "--rules", "-r",
        type=Path,
        default=settings.rules_path,
        help="JSON file overriding the built-in matching and extraction rules",
    )
    parser.add_argument(
        "--concurrency", "-c",
        type=int,
        default=settings.concurrency,
        help=f"Companies enriched at once (default: {settings.concurrency})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Load rules
    if args.rules and not args.rules.exists():
        logger.error(f"Rules file not found: {args.rules}")
        sys.exit(1)

    try:
        rules = load_rules(args.rules)
        if args.rules:
            logger.info(f"Loaded rules from {args.rules}")
    except Exception as e:
        logger.error(f"Failed to load rules: {e}")
        sys.exit(1)

    try:
        if args.name:
            result = asyncio.run(preview_company(args.name, rules))
            sys.exit(0 if result.found else 2)

        store = build_store(args.source, args.input)
        asyncio.run(run_enrichment(
            store=store,
            rules=rules,
            update=args.update_db,
            limit=args.limit,
            concurrency=args.concurrency,
            output_path=args.output,
        ))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Enrichment failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
