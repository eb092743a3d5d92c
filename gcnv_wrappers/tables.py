# -*- coding: utf-8 -*-
"""Reading and writing of read-count and interval tables

All tables use the tab-separated layout of the GATK copy number tools: a SAM-style header
carrying the sequence dictionary (and, for read counts, the sample name), a column header
line and one record per interval with 1-based, closed coordinates.
"""

import csv
import gzip
import typing

import attr

from .genome_regions import GenomeRegion
from .sequence_dictionary import SequenceDictionary

#: Columns for genomic coordinates
COLUMNS_REGION = ("CONTIG", "START", "END")
#: Column for read counts
COLUMN_COUNT = "COUNT"
#: Read group ID used in the header of read-count files
READ_GROUP_ID = "GATKCopyNumber"
#: Suffixes of HDF5 read-count files, which are not read
HDF5_SUFFIXES = (".h5", ".hdf5")


class TableFormatError(ValueError):
    """Raised on malformed or inconsistent table content"""


@attr.s(frozen=True, auto_attribs=True)
class CountRecord:
    """Read count for one interval."""

    #: The interval.
    region: GenomeRegion
    #: The non-negative read count.
    count: int


def _check_regions(dictionary, regions):
    seen = set()
    for region in regions:
        if region in seen:
            raise TableFormatError(f"Duplicate interval {region.human_readable()}")
        if not dictionary.contains_region(region):
            raise TableFormatError(
                f"Interval {region.human_readable()} is not consistent with the sequence dictionary"
            )
        seen.add(region)


@attr.s(frozen=True, auto_attribs=True)
class CountTable:
    """Read counts of one sample over an ordered list of intervals."""

    #: The sequence dictionary.
    dictionary: SequenceDictionary
    #: The sample name.
    sample_name: str
    #: The records.
    records: typing.Tuple[CountRecord, ...]
    #: Path the table was read from, if any.
    path: typing.Optional[str] = attr.ib(default=None, eq=False)

    def __attrs_post_init__(self):
        _check_regions(self.dictionary, self.regions)
        for record in self.records:
            if record.count < 0:
                raise TableFormatError(
                    f"Negative count {record.count} for {record.region.human_readable()}"
                )

    @property
    def regions(self) -> typing.List[GenomeRegion]:
        return [record.region for record in self.records]

    def subset(self, regions: typing.Iterable[GenomeRegion]) -> "CountTable":
        """Return new table with exactly ``regions``, in the order given

        Raises ``KeyError`` for regions not present in this table.
        """
        counts = {record.region: record.count for record in self.records}
        return CountTable(
            dictionary=self.dictionary,
            sample_name=self.sample_name,
            records=tuple(CountRecord(region, counts[region]) for region in regions),
        )


@attr.s(frozen=True, auto_attribs=True)
class IntervalTable:
    """Ordered list of intervals, optionally with per-interval annotations."""

    #: The sequence dictionary.
    dictionary: SequenceDictionary
    #: The intervals.
    regions: typing.Tuple[GenomeRegion, ...]
    #: Names of the annotation columns, empty if not annotated.
    annotation_columns: typing.Tuple[str, ...] = ()
    #: One tuple of annotation values per interval, empty if not annotated.
    annotations: typing.Tuple[typing.Tuple[float, ...], ...] = ()

    def __attrs_post_init__(self):
        _check_regions(self.dictionary, self.regions)
        if self.annotation_columns and len(self.annotations) != len(self.regions):
            raise TableFormatError("Number of annotations does not match number of intervals")

    @property
    def is_annotated(self) -> bool:
        return bool(self.annotation_columns)

    def subset(self, regions: typing.Iterable[GenomeRegion]) -> "IntervalTable":
        """Return new table with exactly ``regions`` in the given order, keeping annotations"""
        regions = tuple(regions)
        if not self.is_annotated:
            return IntervalTable(self.dictionary, regions)
        lookup = dict(zip(self.regions, self.annotations))
        return IntervalTable(
            dictionary=self.dictionary,
            regions=regions,
            annotation_columns=self.annotation_columns,
            annotations=tuple(lookup[region] for region in regions),
        )

    def with_dictionary(self, dictionary: SequenceDictionary) -> "IntervalTable":
        return attr.evolve(self, dictionary=dictionary)


def _open(path, mode):
    if str(path).endswith(".gz"):
        return gzip.open(path, mode)
    return open(path, mode)


def _split_header(path, lines):
    """Return ``(header_lines, column_names, body)`` from an iterable of lines"""
    header = []
    lines = iter(lines)
    for line in lines:
        if line.startswith("@"):
            header.append(line.rstrip("\r\n"))
            continue
        columns = line.rstrip("\r\n").split("\t")
        if tuple(columns[:3]) != COLUMNS_REGION:
            raise TableFormatError(f"{path}: expected column header starting with CONTIG/START/END")
        return header, columns, lines
    raise TableFormatError(f"{path}: missing column header")


def _parse_region(path, line_no, row):
    try:
        return GenomeRegion.from_one_based(row[0], row[1], row[2])
    except (IndexError, ValueError) as e:
        raise TableFormatError(f"{path}:{line_no}: invalid interval {row}") from e


def _sample_name(header):
    for line in header:
        if line.startswith("@RG"):
            for field in line.split("\t")[1:]:
                if field.startswith("SM:"):
                    return field[3:]
    return None


def read_count_table(path) -> CountTable:
    """Read a read-count TSV file"""
    if str(path).lower().endswith(HDF5_SUFFIXES):
        raise TableFormatError(f"{path}: HDF5 read-count files are not supported; convert to TSV")
    with _open(path, "rt") as inputf:
        header, columns, body = _split_header(path, inputf)
        if columns != list(COLUMNS_REGION) + [COLUMN_COUNT]:
            raise TableFormatError(f"{path}: unexpected columns {columns}")
        records = []
        for line_no, row in enumerate(csv.reader(body, delimiter="\t"), len(header) + 2):
            if not row:
                continue
            region = _parse_region(path, line_no, row)
            try:
                count = int(row[3])
            except (IndexError, ValueError) as e:
                raise TableFormatError(f"{path}:{line_no}: invalid count {row}") from e
            records.append(CountRecord(region, count))
    sample_name = _sample_name(header)
    if sample_name is None:
        raise TableFormatError(f"{path}: no sample name (@RG SM:) in header")
    try:
        dictionary = SequenceDictionary.from_header_lines(header)
        return CountTable(dictionary, sample_name, tuple(records), path=str(path))
    except ValueError as e:
        raise TableFormatError(f"{path}: {e}") from e


def write_count_table(table: CountTable, path):
    """Write read-count table to TSV file"""
    with _open(path, "wt") as outputf:
        for line in table.dictionary.header_lines():
            print(line, file=outputf)
        print(f"@RG\tID:{READ_GROUP_ID}\tSM:{table.sample_name}", file=outputf)
        writer = csv.writer(outputf, delimiter="\t", lineterminator="\n")
        writer.writerow(list(COLUMNS_REGION) + [COLUMN_COUNT])
        for record in table.records:
            writer.writerow(record.region.as_tsv_fields() + [record.count])


def read_interval_table(path) -> IntervalTable:
    """Read interval list or annotated-interval TSV file

    All columns after ``END`` are read as float annotations.
    """
    with _open(path, "rt") as inputf:
        header, columns, body = _split_header(path, inputf)
        annotation_columns = tuple(columns[3:])
        regions = []
        annotations = []
        for line_no, row in enumerate(csv.reader(body, delimiter="\t"), len(header) + 2):
            if not row:
                continue
            regions.append(_parse_region(path, line_no, row))
            if annotation_columns:
                if len(row) != len(columns):
                    raise TableFormatError(f"{path}:{line_no}: expected {len(columns)} columns")
                try:
                    annotations.append(tuple(float(value) for value in row[3:]))
                except ValueError as e:
                    raise TableFormatError(f"{path}:{line_no}: invalid annotation {row}") from e
    try:
        dictionary = SequenceDictionary.from_header_lines(header)
        return IntervalTable(dictionary, tuple(regions), annotation_columns, tuple(annotations))
    except ValueError as e:
        raise TableFormatError(f"{path}: {e}") from e


def write_interval_table(table: IntervalTable, path):
    """Write interval table to TSV file, including annotation columns if any"""
    with _open(path, "wt") as outputf:
        for line in table.dictionary.header_lines():
            print(line, file=outputf)
        writer = csv.writer(outputf, delimiter="\t", lineterminator="\n")
        writer.writerow(list(COLUMNS_REGION) + list(table.annotation_columns))
        for i, region in enumerate(table.regions):
            values = [repr(v) for v in table.annotations[i]] if table.is_annotated else []
            writer.writerow(region.as_tsv_fields() + values)
