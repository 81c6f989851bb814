"""
CLI エントリーポイント。--sample（取得してレポート）, --evaluate（レポートのみ）を処理。
"""
from __future__ import annotations

import argparse
import sys
from typing import Any, Optional

from dotenv import load_dotenv

from pagesampler.config import get_api_token, get_api_url, load_config
from pagesampler.errors import ConfigError
from pagesampler.job.params import SamplerParams
from pagesampler.report import tables
from pagesampler.report.evaluator import ComparisonReport, evaluate
from pagesampler.store.sample_store import SampleStore
from pagesampler.util.log import get_logger, setup_logging

load_dotenv()


def _apply_overrides(config: dict[str, Any], args: argparse.Namespace) -> dict[str, Any]:
    sampler_cfg = config["sampler"] = dict(config.get("sampler") or {})
    for key, value in (
        ("sample_count", args.samples),
        ("threads", args.threads),
        ("target_dir", args.target_dir),
        ("date_start", args.start),
        ("date_end", args.end),
    ):
        if value is not None:
            sampler_cfg[key] = value
    return config


def run_evaluation(target_dir: str) -> ComparisonReport:
    """保存済みサンプルを読み込んで比較し、レポートをログに出す。"""
    logger = get_logger("main")
    store = SampleStore(target_dir)
    loaded = store.load_all()
    logger.info("Loaded %d sample files from %s (%d corrupted)", len(loaded.samples), target_dir, len(loaded.corrupted))
    report = evaluate(loaded)
    tables.log_report(report)
    return report


def run_sampling(params: SamplerParams, dry_run: bool = False) -> int:
    """サンプリングを実行し、続けてレポートを出す。終了コードを返す。"""
    from pagesampler.job.runner import build_sampler

    logger = get_logger("main")
    if dry_run:
        logger.info(
            "dry-run: would fetch %d samples in %d threads, %s..%s, into %s",
            params.sample_count,
            params.threads,
            params.start_date,
            params.end_date,
            params.target_dir,
        )
        return 0

    base_url = get_api_url()
    token = get_api_token()
    if not base_url:
        logger.error("YOUTRACK_API_URL is not set")
        return 2
    if not token:
        logger.warning("YOUTRACK_TOKEN is not set, requests are sent without authorization")

    sampler = build_sampler(params, base_url, token)
    summary = sampler.run(params.sample_count, params.threads, params.timeout_sec)
    run_evaluation(str(params.target_dir))
    return 0 if summary.completed else 1


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Paginated listing consistency sampler")
    parser.add_argument("--sample", action="store_true", help="Fetch samples, then print statistics")
    parser.add_argument("--evaluate", action="store_true", help="Only print statistics for existing samples")
    parser.add_argument("--dry-run", action="store_true", help="No API access, log the plan only")
    parser.add_argument("--samples", type=int, metavar="N", help="Number of samples to fetch")
    parser.add_argument("--threads", type=int, metavar="W", help="Worker threads")
    parser.add_argument("--target-dir", type=str, metavar="DIR", help="Sample output directory")
    parser.add_argument("--start", type=str, metavar="YYYY-MM-DD", help="Start date")
    parser.add_argument("--end", type=str, metavar="YYYY-MM-DD", help="End date")
    parser.add_argument("--config", type=str, metavar="PATH", help="config.yaml path")
    args = parser.parse_args(argv)

    if not args.sample and not args.evaluate:
        parser.print_help()
        sys.exit(0)

    setup_logging()
    logger = get_logger("main")
    config = _apply_overrides(load_config(args.config), args)

    if args.evaluate:
        run_evaluation(str(config["sampler"].get("target_dir") or "data/samples"))
        return

    try:
        params = SamplerParams.from_config(config)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)
    sys.exit(run_sampling(params, dry_run=args.dry_run))


if __name__ == "__main__":
    main()
