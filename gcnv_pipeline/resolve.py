# -*- coding: utf-8 -*-
"""Resolution of the run mode and validation of the combination of inputs

All checks in this module only look at paths and their existence; no file content is read.
"""

from collections import defaultdict
import os
import typing

from logzero import logger
from pydantic import ValidationError

from gcnv_pipeline.exceptions import InvalidConfiguration
from gcnv_pipeline.models.common import RunMode
from gcnv_pipeline.models.gcnv import EngineConfig
from gcnv_pipeline.models.run import CaseRun, CohortRun, IntervalRequest, RunConfiguration


def find_duplicates(paths: typing.Iterable[str]) -> typing.List[str]:
    """Return paths that refer to the same file as another path in ``paths``"""
    by_file = defaultdict(list)
    for path in paths:
        by_file[os.path.realpath(path)].append(path)
    return [path for group in by_file.values() if len(group) > 1 for path in group]


def _check_readable(path: str, what: str = "Read-count file"):
    if not os.path.isfile(path) or not os.access(path, os.R_OK):
        raise InvalidConfiguration(f"{what} {path} does not exist or is not readable.")


def _check_directory(path: str, what: str):
    if not os.path.exists(path):
        raise InvalidConfiguration(f"{what} {path} does not exist.")


def resolve_run_configuration(
    run_mode: RunMode | str,
    read_count_files: typing.Sequence[str],
    contig_ploidy_calls: str,
    output_dir: str,
    output_prefix: str,
    model: str | None = None,
    intervals: IntervalRequest | None = None,
    annotated_intervals: str | None = None,
    engine: EngineConfig | None = None,
) -> RunConfiguration:
    """Validate the combination of inputs and return the configuration for ``run_mode``

    Raises ``InvalidConfiguration`` for every illegal combination.
    """
    read_count_files = list(read_count_files)
    if not read_count_files:
        raise InvalidConfiguration("At least one read-count file must be provided.")
    duplicates = find_duplicates(read_count_files)
    if duplicates:
        raise InvalidConfiguration(
            "List of input read-count files cannot contain duplicates: {}".format(
                ", ".join(duplicates)
            )
        )
    for path in read_count_files:
        _check_readable(path)
    if model is not None:
        _check_directory(model, "Input denoising-model directory")

    try:
        run_mode = RunMode(run_mode)
    except ValueError as e:
        raise InvalidConfiguration(f"Invalid run mode: {run_mode}") from e

    match run_mode:
        case RunMode.COHORT:
            logger.info("Running the tool in the COHORT mode...")
            if len(read_count_files) < 2:
                raise InvalidConfiguration(
                    "At least two samples must be provided in the COHORT mode"
                )
            if model is not None:
                logger.info(
                    "(advanced feature) A denoising-model directory is provided in the COHORT "
                    "mode; using the model for initialization and ignoring specified and/or "
                    "annotated intervals."
                )
            factory = CohortRun
            mode_args = dict(
                model=model, intervals=intervals, annotated_intervals=annotated_intervals
            )
        case RunMode.CASE:
            logger.info("Running the tool in the CASE mode...")
            if model is None:
                raise InvalidConfiguration(
                    "An input denoising-model directory must be provided in the CASE mode."
                )
            if intervals is not None:
                raise InvalidConfiguration(
                    "Invalid combination of inputs: Running in CASE mode, "
                    "but intervals were provided."
                )
            if annotated_intervals is not None:
                raise InvalidConfiguration(
                    "Invalid combination of inputs: Running in CASE mode, "
                    "but annotated intervals were provided."
                )
            factory = CaseRun
            mode_args = dict(model=model)

    if not output_prefix:
        raise InvalidConfiguration("Output prefix must not be empty.")
    if os.sep in output_prefix or "/" in output_prefix:
        raise InvalidConfiguration(
            f"Output prefix {output_prefix} must not contain a path separator."
        )
    _check_directory(contig_ploidy_calls, "Input contig-ploidy calls directory")
    _check_directory(output_dir, "Output directory")
    if annotated_intervals is not None and model is None:
        _check_readable(annotated_intervals, "Annotated-intervals file")

    try:
        return factory(
            read_count_files=read_count_files,
            contig_ploidy_calls=contig_ploidy_calls,
            output_dir=output_dir,
            output_prefix=output_prefix,
            engine=engine or EngineConfig(),
            **mode_args,
        )
    except ValidationError as e:
        raise InvalidConfiguration(f"Invalid run configuration:\n{e}") from e
