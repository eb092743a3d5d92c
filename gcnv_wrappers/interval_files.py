# -*- coding: utf-8 -*-
"""Resolve interval arguments (``-L`` / ``-XL``) against a sequence dictionary

Each argument is either a path to an interval file or a region string:

- ``*.bed``: BED file, 0-based half-open coordinates
- ``*.interval_list``: Picard interval list, SAM header and 1-based closed coordinates
- ``*.list``, ``*.intervals``: one region string per line
- ``chr1``, ``chr1:1,000``, ``chr1:1,000-2,000``: region strings, 1-based closed
"""

import enum
import os
import re
import typing

from .genome_regions import GenomeRegion
from .sequence_dictionary import SequenceDictionary

#: Suffixes of BED files
SUFFIXES_BED = (".bed",)
#: Suffixes of Picard interval lists
SUFFIXES_PICARD = (".interval_list",)
#: Suffixes of plain region lists
SUFFIXES_LIST = (".list", ".intervals")

#: Regular expression for records of Picard interval lists
PATTERN_PICARD = re.compile(r"^([^\s]+)\t([0-9]+)\t([0-9]+)(\t.*)?$")


class IntervalResolutionError(ValueError):
    """Raised when an interval argument cannot be resolved against the sequence dictionary"""


class IntervalMergingRule(enum.StrEnum):
    """How to merge intervals after sorting."""

    #: Merge overlapping and abutting intervals
    ALL = "ALL"
    #: Merge overlapping intervals only
    OVERLAPPING_ONLY = "OVERLAPPING_ONLY"


def _check(region: GenomeRegion, dictionary: SequenceDictionary, source: str) -> GenomeRegion:
    if region.chrom not in dictionary:
        raise IntervalResolutionError(
            f"Contig {region.chrom} of interval from {source} is not in the sequence dictionary"
        )
    if not dictionary.contains_region(region):
        raise IntervalResolutionError(
            f"Interval {region.human_readable()} from {source} is out of bounds for contig "
            f"{region.chrom} of length {dictionary.length_of(region.chrom)}"
        )
    return region


def parse_region_string(value: str, dictionary: SequenceDictionary) -> GenomeRegion:
    """Parse region string, a bare contig name yields the whole contig"""
    value = value.strip()
    if value in dictionary:
        return GenomeRegion(value, 0, dictionary.length_of(value))
    try:
        region = GenomeRegion.from_human_readable(value)
    except ValueError as e:
        raise IntervalResolutionError(str(e)) from e
    return _check(region, dictionary, value)


def _yield_lines(path):
    with open(path, "rt") as inputf:
        for line in inputf:
            line = line.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            yield line


def _yield_bed(path, dictionary):
    for line in _yield_lines(path):
        if line.startswith(("track", "browser")):
            continue
        try:
            region = GenomeRegion.from_bed_line(line)
        except ValueError as e:
            raise IntervalResolutionError(f"Invalid BED record '{line}' in {path}") from e
        yield _check(region, dictionary, path)


def _yield_picard(path, dictionary):
    for line in _yield_lines(path):
        if line.startswith("@"):
            continue
        m = PATTERN_PICARD.match(line)
        if not m:
            raise IntervalResolutionError(f"Unexpected record '{line}' in interval list '{path}'")
        region = GenomeRegion.from_one_based(m.group(1), m.group(2), m.group(3))
        yield _check(region, dictionary, path)


def parse_interval_argument(
    value: str, dictionary: SequenceDictionary
) -> typing.List[GenomeRegion]:
    """Return regions for one interval argument (file path or region string)"""
    if value.endswith(SUFFIXES_BED + SUFFIXES_PICARD + SUFFIXES_LIST):
        if not os.path.exists(value):
            raise IntervalResolutionError(f"Interval file {value} does not exist")
        if value.endswith(SUFFIXES_BED):
            return list(_yield_bed(value, dictionary))
        elif value.endswith(SUFFIXES_PICARD):
            return list(_yield_picard(value, dictionary))
        else:
            return [parse_region_string(line, dictionary) for line in _yield_lines(value)]
    return [parse_region_string(value, dictionary)]


def merge_regions(
    regions: typing.Iterable[GenomeRegion],
    dictionary: SequenceDictionary,
    rule: IntervalMergingRule = IntervalMergingRule.OVERLAPPING_ONLY,
) -> typing.List[GenomeRegion]:
    """Sort ``regions`` in dictionary order and merge them according to ``rule``"""
    result = []
    for region in sorted(set(regions), key=dictionary.sort_key):
        if result and (
            result[-1].overlaps(region)
            or (rule == IntervalMergingRule.ALL and result[-1].abuts(region))
        ):
            result[-1] = result[-1].merge(region)
        else:
            result.append(region)
    return result


def subtract_regions(
    regions: typing.Iterable[GenomeRegion], excluded: typing.Iterable[GenomeRegion]
) -> typing.List[GenomeRegion]:
    """Remove all positions covered by ``excluded`` from ``regions``, keeping the order"""
    excluded = list(excluded)
    result = []
    for region in regions:
        pieces = [region]
        for other in excluded:
            pieces = [piece for p in pieces for piece in p.subtract(other)]
        result += pieces
    return result


def _pad(region, padding, dictionary):
    if not padding:
        return region
    padded = region.extend(padding)
    end = min(padded.end, dictionary.length_of(padded.chrom))
    return GenomeRegion(padded.chrom, padded.begin, end)


def resolve_intervals(
    includes: typing.Iterable[str],
    dictionary: SequenceDictionary,
    excludes: typing.Iterable[str] = (),
    merging_rule: IntervalMergingRule = IntervalMergingRule.OVERLAPPING_ONLY,
    padding: int = 0,
    exclusion_padding: int = 0,
) -> typing.List[GenomeRegion]:
    """Resolve interval arguments to a sorted, merged list of regions"""
    included = [
        _pad(region, padding, dictionary)
        for value in includes
        for region in parse_interval_argument(value, dictionary)
    ]
    excluded = [
        _pad(region, exclusion_padding, dictionary)
        for value in excludes
        for region in parse_interval_argument(value, dictionary)
    ]
    merged = merge_regions(included, dictionary, merging_rule)
    if excluded:
        return subtract_regions(merged, merge_regions(excluded, dictionary))
    return merged
