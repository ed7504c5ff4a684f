import argparse
import logging
import sys
from typing import Optional, Sequence

from layout_intent import (
    DriverConfig,
    IterativeComponentReplacement,
    Layout,
    print_layout,
)
from layout_intent.demo import SCENARIOS

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Reduce a demo layout to components")
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        default="two-boxes",
        help="Demo layout to reduce (default: two-boxes)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Print the layout tree before every step",
    )
    parser.add_argument(
        "--check-invariants",
        action="store_true",
        help="Validate the layout graph after every replacement",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Building scenario %s", args.scenario)
    layout = SCENARIOS[args.scenario]()

    print("Layout before:")
    print(print_layout(layout))

    def _trace(current: Layout, step: int) -> None:
        print(f"\nStep {step}:")
        print(print_layout(current))

    driver = IterativeComponentReplacement(
        layout,
        on_step=_trace if args.trace else None,
        config=DriverConfig(check_invariants=args.check_invariants),
    )
    done = driver.run()

    print(f"\nResult: {driver.state.value} after {driver.steps} replacement(s)")
    for applied in driver.history:
        target = f"component#{applied.component_id}" if applied.component_id is not None else "nothing"
        boxes = ", ".join(f"box#{box_id}" for box_id in applied.box_ids)
        print(f"  [{applied.step}] {applied.pattern_name}: {boxes} -> {target}")

    print("Layout after:")
    print(print_layout(layout))
    return 0 if done else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
