# -*- coding: utf-8 -*-
"""Denoise read counts and call germline CNVs in the COHORT or CASE mode

The tool validates the combination of inputs, determines the intervals to work on, subsets
the read-count files to these intervals and runs the ``gcnvkernel`` denoising and calling
script of the selected mode.
"""

import argparse
import sys

from pydantic import ValidationError

from gcnv_wrappers.interval_files import IntervalMergingRule

from .. import __version__
from ..exceptions import GcnvException, InvalidConfiguration
from ..models import dump_config, load_config
from ..models.common import RunMode
from ..models.gcnv import EngineConfig
from ..models.run import IntervalRequest
from ..pipeline import run_germline_cnv_caller
from ..resolve import resolve_run_configuration
from .impl.logging import LVL_IMPORTANT, LVL_SUCCESS, log, log_failure, setup_logging


def build_engine_config(args) -> EngineConfig:
    """Load engine configuration and apply command line overrides"""
    if args.config:
        engine = load_config(args.config, EngineConfig)
    else:
        engine = EngineConfig()
    overrides = {
        key: value
        for key, value in (
            ("python_executable", args.python_executable),
            ("script_dir", args.engine_script_dir),
            ("num_threads", args.threads),
        )
        if value is not None
    }
    if not overrides:
        return engine
    try:
        return EngineConfig.model_validate({**engine.model_dump(), **overrides})
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid engine settings:\n{e}") from e


def build_interval_request(args) -> IntervalRequest | None:
    """Return the explicit interval request, if any"""
    if not args.intervals:
        if args.exclude_intervals:
            raise InvalidConfiguration("Excluded intervals (-XL) require intervals (-L).")
        return None
    try:
        return IntervalRequest(
            intervals=args.intervals,
            exclude_intervals=args.exclude_intervals,
            interval_merging_rule=args.interval_merging_rule,
            interval_padding=args.interval_padding,
            interval_exclusion_padding=args.interval_exclusion_padding,
        )
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid interval arguments:\n{e}") from e


def run(args):
    """Program entry point after argument parsing"""
    setup_logging(args.verbose)
    log("gCNV germline calling -- {mode}", args={"mode": args.run_mode}, level=LVL_IMPORTANT)
    try:
        config = resolve_run_configuration(
            run_mode=args.run_mode,
            read_count_files=args.inputs,
            contig_ploidy_calls=args.contig_ploidy_calls,
            output_dir=args.output,
            output_prefix=args.output_prefix,
            model=args.model,
            intervals=build_interval_request(args),
            annotated_intervals=args.annotated_intervals,
            engine=build_engine_config(args),
        )
        run_germline_cnv_caller(config, tmp_dir=args.tmp_dir)
    except GcnvException as e:
        log_failure(e)
        return 1
    log(
        "denoising and calling done for {n} samples",
        args={"n": len(config.read_count_files)},
        level=LVL_SUCCESS,
    )
    return 0


def main(argv=None):
    """Program entry point including command line argument parsing"""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--version", action="version", version="%%(prog)s %s" % __version__)
    parser.add_argument(
        "--verbose", action="store_true", default=False, help="Enable debug output"
    )
    parser.add_argument(
        "--print-default-config",
        action="store_true",
        default=False,
        help="Print default engine configuration as YAML and exit",
    )

    group = parser.add_argument_group("Inputs and outputs")
    group.add_argument(
        "--run-mode", choices=[mode.value for mode in RunMode], help="Tool run mode"
    )
    group.add_argument(
        "-I",
        "--input",
        dest="inputs",
        action="append",
        default=[],
        help="Read-count file, one per sample; specify multiple times",
    )
    group.add_argument(
        "--contig-ploidy-calls", help="Contig-ploidy calls directory of the samples"
    )
    group.add_argument("--output", help="Existing output directory")
    group.add_argument("--output-prefix", help="Prefix for output model and calls directories")
    group.add_argument("--model", help="Input denoising-model directory")
    group.add_argument("--tmp-dir", help="Directory for temporary files")

    group = parser.add_argument_group("Intervals")
    group.add_argument(
        "-L",
        "--intervals",
        action="append",
        default=[],
        help="Region or interval file to include; specify multiple times",
    )
    group.add_argument(
        "-XL",
        "--exclude-intervals",
        action="append",
        default=[],
        help="Region or interval file to exclude; specify multiple times",
    )
    group.add_argument(
        "--interval-merging-rule",
        choices=[rule.value for rule in IntervalMergingRule],
        default=IntervalMergingRule.OVERLAPPING_ONLY.value,
        help="Merging rule for abutting intervals; must be OVERLAPPING_ONLY",
    )
    group.add_argument(
        "--interval-padding", type=int, default=0, help="Interval padding; must be 0"
    )
    group.add_argument(
        "--interval-exclusion-padding",
        type=int,
        default=0,
        help="Interval exclusion padding; must be 0",
    )
    group.add_argument("--annotated-intervals", help="Annotated-intervals file with GC content")

    group = parser.add_argument_group("Engine")
    group.add_argument("--config", help="YAML file with engine configuration")
    group.add_argument("--python-executable", help="Python interpreter for the engine")
    group.add_argument("--engine-script-dir", help="Directory containing the engine scripts")
    group.add_argument("--threads", type=int, help="Number of engine threads")

    args = parser.parse_args(argv)
    if args.print_default_config:
        print(dump_config(EngineConfig()), end="")
        return 0
    for name in ("run_mode", "contig_ploidy_calls", "output", "output_prefix"):
        if getattr(args, name) is None:
            parser.error("the following argument is required: --{}".format(name.replace("_", "-")))
    if not args.inputs:
        parser.error("the following argument is required: -I/--input")
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
