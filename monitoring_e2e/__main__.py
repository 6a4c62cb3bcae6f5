"""Run the monitoring scenarios against the current cluster"""

import argparse
import logging
import sys

from monitoring_e2e.config import read_config
from monitoring_e2e.exceptions import MonitoringTestError
from monitoring_e2e.runner import get_scenario_runner
from monitoring_e2e.scenarios import SCENARIOS, get_scenario
from monitoring_e2e.utils import get_logger, run_with_error_logging, setup_logging

logger = get_logger("application")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check that the cluster monitoring stack observes and alerts on workloads")
    parser.add_argument("--config", help="YAML configuration merged over the defaults")
    parser.add_argument(
        "--scenario",
        action="append",
        choices=[scenario.name for scenario in SCENARIOS],
        help="Scenario to run, may be repeated (default: all)",
    )
    parser.add_argument("--list", action="store_true", help="List the scenarios and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug messages")
    args = parser.parse_args(argv)

    if args.list:
        for scenario in SCENARIOS:
            print(f"{scenario.name:26} {scenario.description}")
        return 0

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    selected = [get_scenario(name) for name in args.scenario] if args.scenario else list(SCENARIOS)

    try:
        runner = get_scenario_runner(read_config(args.config))
    except MonitoringTestError:
        logger.exception("Unable to initialise the scenario runner")
        return 2

    failed = []
    for scenario in selected:
        try:
            run_with_error_logging(runner.run, scenario)
        except (MonitoringTestError, AssertionError):
            failed.append(scenario.name)

    logger.info("%d scenario(s) passed, %d failed", len(selected) - len(failed), len(failed))
    if failed:
        logger.error("Failed scenarios: %s", ", ".join(failed))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
