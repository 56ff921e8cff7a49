"""Command-line entrypoint printing daily or cumulative ticket series."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from ticket_series.application.dto import ChartSeriesRequest
from ticket_series.application.use_cases import BuildChartSeriesUseCase, ChartSeriesContext
from ticket_series.config import CACHE_DIR
from ticket_series.domain.models import ChartPreferences, DistributionWeight, Metric
from ticket_series.infrastructure.repositories.export_repositories import ExportSalesRepository
from ticket_series.infrastructure.storage.key_value import JsonFileStore
from ticket_series.infrastructure.storage.result_cache import ResultCache
from ticket_series.presentation.series_report import render_csv


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Estimate daily ticket sales from cumulative report exports")
    parser.add_argument("export", type=str, help="Path to a CSV or Excel ticket report export")
    parser.add_argument("--range", dest="date_range", default="14d", help="7d, 14d, 28d or custom")
    parser.add_argument("--start", type=str, help="Custom window start (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="Custom window end (YYYY-MM-DD)")
    parser.add_argument("--today", type=str, help="Override today's date (YYYY-MM-DD)")
    parser.add_argument(
        "--weight",
        choices=[w.value for w in DistributionWeight],
        default=DistributionWeight.EVEN.value,
    )
    parser.add_argument("--metric", choices=[m.value for m in Metric], default=Metric.TICKETS_DAILY.value)
    parser.add_argument("--group-by", choices=["entity", "show"], default="entity")
    parser.add_argument("--entity", action="append", default=[], help="Limit output to this entity (repeatable)")
    parser.add_argument("--hide-estimates", action="store_true")
    parser.add_argument("--ranges", action="store_true", help="Expand precomputed ranges instead of raw reports")
    parser.add_argument("--cache-dir", type=str, help="Directory for the settled-history cache")
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    date_range = args.date_range
    custom_start = date.fromisoformat(args.start) if args.start else None
    custom_end = date.fromisoformat(args.end) if args.end else None
    if custom_start and custom_end:
        date_range = "custom"

    repository = ExportSalesRepository(Path(args.export), group_by=args.group_by)
    cache = ResultCache(JsonFileStore(Path(args.cache_dir) if args.cache_dir else CACHE_DIR))
    context = ChartSeriesContext(
        provider=repository,
        cache=cache,
        range_provider=repository if args.ranges else None,
    )
    prefs = ChartPreferences(
        date_range=date_range,
        custom_start=custom_start,
        custom_end=custom_end,
        metric=Metric(args.metric),
        show_estimations=not args.hide_estimates,
        distribution_weight=DistributionWeight(args.weight),
    )
    request = ChartSeriesRequest(
        entity_ids=repository.entity_ids(),
        preferences=prefs,
        selected_entities=args.entity,
        today=date.fromisoformat(args.today) if args.today else None,
    )
    response = BuildChartSeriesUseCase(context).execute(request)

    sys.stdout.write(render_csv(response.matrix, response.entity_ids).decode("utf-8"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
