# -*- coding: utf-8 -*-
"""Validate read-count files against the authoritative intervals and subset them"""

import os
import tempfile
import typing

from logzero import logger

from gcnv_pipeline.exceptions import DataConsistencyError, WorkDirectoryError
from gcnv_pipeline.reconcile import read_counts
from gcnv_wrappers.tables import CountTable, IntervalTable, write_count_table


def subset_read_counts(counts: CountTable, intervals: IntervalTable, path: str) -> CountTable:
    """Check ``counts`` (read from ``path``) against ``intervals`` and return the subset

    The subset has exactly the intervals of ``intervals``, in their order.
    """
    if not counts.dictionary.is_same_dictionary(intervals.dictionary):
        raise DataConsistencyError(
            f"Sequence dictionary for read-count file {path} does not match those in "
            "other read-count files.",
            path,
        )
    missing = set(intervals.regions) - set(counts.regions)
    if missing:
        raise DataConsistencyError(
            f"Intervals for read-count file {path} do not contain all specified intervals "
            f"({len(missing)} of {len(intervals.regions)} missing).",
            path,
        )
    return counts.subset(intervals.regions)


def subset_read_count_files(
    intervals: IntervalTable,
    read_count_files: typing.Sequence[str],
    work_dir: str,
    preloaded: typing.Optional[typing.Dict[str, CountTable]] = None,
) -> typing.Tuple[str, ...]:
    """Validate and subset all read-count files, one at a time and in order

    Tables in ``preloaded`` (by path) are used instead of reading the file again.  Returns the
    paths of the written subset files, in the order of ``read_count_files``.
    """
    logger.info("Validating and aggregating data from input read-count files...")
    preloaded = preloaded or {}
    num_samples = len(read_count_files)
    result = []
    for sample_index, path in enumerate(read_count_files):
        logger.info("Aggregating read-count file %s (%d / %d)", path, sample_index + 1, num_samples)
        counts = preloaded[path] if path in preloaded else read_counts(path)
        subset = subset_read_counts(counts, intervals, path)
        subset_path = os.path.join(work_dir, f"sample-{sample_index}-*.tsv")
        try:
            fd, subset_path = tempfile.mkstemp(
                prefix=f"sample-{sample_index}-", suffix=".tsv", dir=work_dir
            )
            os.close(fd)
            write_count_table(subset, subset_path)
        except OSError as e:
            raise WorkDirectoryError(
                f"Could not write subset of {path} to {subset_path}: {e}"
            ) from e
        logger.debug("Wrote %d intervals of %s to %s", len(subset.records), path, subset_path)
        result.append(subset_path)
    return tuple(result)
