#!/usr/bin/env python
"""
HAR Activity Recognition - XGBoost tree / linear booster evaluation
Main execution script: PCA diagnostics, training and test-set evaluation
"""

import argparse
import sys
import traceback
import warnings
from datetime import datetime

from har_boost.config import load_config
from har_boost.errors import HARPipelineError
from har_boost.pipeline import run_pipeline

warnings.filterwarnings('ignore')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="HAR XGBoost evaluation pipeline")
    parser.add_argument(
        "--config", type=str, default="config.yaml", help="Path to the YAML config file"
    )
    parser.add_argument(
        "--booster",
        type=str,
        default=None,
        choices=["tree", "linear", "both"],
        help="Booster variant to train (default: training.boosters from the config)",
    )
    parser.add_argument(
        "--no-plots", action="store_true", help="Skip writing diagnostic figures"
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main execution pipeline."""
    args = parse_args(argv)

    print("=" * 60)
    print("HAR Activity Recognition - XGBoost Evaluation")
    print("=" * 60)
    print(f"Started: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"\n❌ Could not load configuration: {e}")
        return 1
    print(f"✓ Configuration loaded from {args.config}")

    boosters = None
    if args.booster == "both":
        boosters = ["tree", "linear"]
    elif args.booster is not None:
        boosters = [args.booster]

    try:
        result = run_pipeline(config, boosters=boosters, save_plots=False if args.no_plots else None)
    except HARPipelineError as e:
        print(f"\n❌ Input error: {e}")
        return 1
    except Exception as e:
        print(f"\n❌ Pipeline failed: {e}")
        traceback.print_exc()
        return 1

    print("\n" + "=" * 60)
    print("RUN COMPLETE")
    print("=" * 60)
    for booster, report in result.reports.items():
        print(f"✓ {booster:<6} accuracy: {report.accuracy:.4f}  log-loss: {report.log_loss:.4f}")
    print(f"Finished: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
