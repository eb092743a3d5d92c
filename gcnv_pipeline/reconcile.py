# -*- coding: utf-8 -*-
"""Determine the authoritative set of intervals for a run

The intervals come from exactly one source: the interval file recorded in an input model
directory, an explicit interval request, or the intervals of the first read-count file.
Whatever the source, the result is written to a file in the work directory.
"""

import enum
import os
import tempfile
import typing

import attr
from logzero import logger

from gcnv_pipeline.exceptions import (
    DataConsistencyError,
    InvalidConfiguration,
    WorkDirectoryError,
)
from gcnv_pipeline.models.common import RunMode
from gcnv_pipeline.models.run import IntervalRequest, RunConfiguration
from gcnv_wrappers.interval_files import IntervalResolutionError, resolve_intervals
from gcnv_wrappers.tables import (
    CountTable,
    IntervalTable,
    TableFormatError,
    read_count_table,
    read_interval_table,
    write_interval_table,
)

#: Name of the interval file written by the engine into the model directory
INPUT_MODEL_INTERVAL_FILE = "interval_list.tsv"


class IntervalSource(enum.StrEnum):
    """Where the authoritative intervals came from."""

    MODEL = "model"
    REQUEST = "request"
    FIRST_SAMPLE = "first_sample"


@attr.s(frozen=True, auto_attribs=True)
class ResolvedIntervals:
    """The authoritative intervals of a run and the file they were written to."""

    #: The intervals, possibly annotated.
    table: IntervalTable
    #: Path of the written interval file.
    path: str
    #: The source of the intervals.
    source: IntervalSource


def read_model_intervals(model_dir: str) -> IntervalTable:
    """Read the intervals recorded in a model directory"""
    path = os.path.join(model_dir, INPUT_MODEL_INTERVAL_FILE)
    if not os.path.isfile(path) or not os.access(path, os.R_OK):
        raise InvalidConfiguration(f"Interval file {path} of the input model cannot be read.")
    try:
        return read_interval_table(path)
    except (OSError, UnicodeDecodeError, TableFormatError) as e:
        raise InvalidConfiguration(
            f"Interval file {path} of the input model is invalid: {e}"
        ) from e


def read_counts(path: str) -> CountTable:
    """Read read-count file, raising ``DataConsistencyError`` naming ``path`` on failure"""
    try:
        return read_count_table(path)
    except (OSError, UnicodeDecodeError, TableFormatError) as e:
        raise DataConsistencyError(f"Could not read read-count file {path}: {e}", path) from e


def request_intervals(request: IntervalRequest, counts: CountTable) -> IntervalTable:
    """Resolve an explicit interval request against the dictionary of ``counts``"""
    logger.info("Intervals specified...")
    try:
        regions = resolve_intervals(
            request.intervals,
            counts.dictionary,
            excludes=request.exclude_intervals,
            merging_rule=request.interval_merging_rule,
            padding=request.interval_padding,
            exclusion_padding=request.interval_exclusion_padding,
        )
    except IntervalResolutionError as e:
        raise InvalidConfiguration(f"Could not resolve interval request: {e}") from e
    return IntervalTable(counts.dictionary, tuple(regions))


def annotate_intervals(
    annotated_intervals: typing.Optional[str], intervals: IntervalTable
) -> IntervalTable:
    """Attach annotations from ``annotated_intervals`` to ``intervals``

    The annotated-interval file must contain all of ``intervals``.  Returns ``intervals``
    unchanged if no file is given.
    """
    if annotated_intervals is None:
        logger.info(
            "No GC-content annotations for intervals found; "
            "explicit GC-bias correction will not be performed..."
        )
        return intervals
    logger.info("Reading and validating GC-content annotations for intervals...")
    try:
        annotated = read_interval_table(annotated_intervals)
    except (OSError, UnicodeDecodeError, TableFormatError) as e:
        raise DataConsistencyError(
            f"Could not read annotated-intervals file {annotated_intervals}: {e}",
            annotated_intervals,
        ) from e
    if not annotated.is_annotated:
        raise DataConsistencyError(
            f"Annotated-intervals file {annotated_intervals} has no annotation columns.",
            annotated_intervals,
        )
    if not annotated.dictionary.is_same_dictionary(intervals.dictionary):
        logger.warning(
            "Sequence dictionary in annotated-intervals file does not match the master "
            "sequence dictionary."
        )
    missing = set(intervals.regions) - set(annotated.regions)
    if missing:
        raise DataConsistencyError(
            f"Annotated intervals in {annotated_intervals} do not contain all specified "
            f"intervals ({len(missing)} missing).",
            annotated_intervals,
        )
    return annotated.subset(intervals.regions).with_dictionary(intervals.dictionary)


def reconcile_intervals(
    config: RunConfiguration, work_dir: str
) -> typing.Tuple[ResolvedIntervals, typing.Optional[CountTable]]:
    """Resolve and write the authoritative intervals of the run

    Returns the resolved intervals and the table of the first read-count file if it had to
    be read, so that it does not need to be read again.
    """
    first_counts = None
    if config.model is not None:
        if config.run_mode == RunMode.COHORT and (
            config.intervals is not None or config.annotated_intervals is not None
        ):
            logger.info(
                "Intervals and annotations are taken from the input model %s, "
                "the specified and/or annotated intervals are ignored.",
                config.model,
            )
        table = read_model_intervals(config.model)
        source = IntervalSource.MODEL
    else:
        first_path = config.read_count_files[0]
        first_counts = read_counts(first_path)
        if config.intervals is not None:
            table = request_intervals(config.intervals, first_counts)
            source = IntervalSource.REQUEST
        else:
            logger.info("Retrieving intervals from first read-count file (%s)...", first_path)
            table = IntervalTable(first_counts.dictionary, tuple(first_counts.regions))
            source = IntervalSource.FIRST_SAMPLE
        table = annotate_intervals(config.annotated_intervals, table)

    if not table.regions:
        raise InvalidConfiguration("The resolved set of intervals is empty.")
    logger.info("Using %d intervals (source: %s)", len(table.regions), source)

    path = os.path.join(work_dir, "intervals-*.tsv")
    try:
        fd, path = tempfile.mkstemp(prefix="intervals-", suffix=".tsv", dir=work_dir)
        os.close(fd)
        write_interval_table(table, path)
    except OSError as e:
        raise WorkDirectoryError(f"Could not write interval file {path}: {e}") from e
    return ResolvedIntervals(table, path, source), first_counts
