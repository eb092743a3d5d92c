# -*- coding: utf-8 -*-
"""Sequence dictionaries as found in the SAM-style headers of the copy number TSV files"""

import functools
import re
import typing

import attr

from .genome_regions import GenomeRegion

#: SAM header version written into file headers
SAM_HEADER_VERSION = "1.6"

#: Regular expression patterns to parse ``@SQ`` header lines
PATTERN_DICT = re.compile(r"^@SQ\t(?P<fields>.*)$")


@attr.s(frozen=True, auto_attribs=True)
class SequenceRecord:
    """One contig of a sequence dictionary."""

    #: The contig name.
    name: str
    #: The contig length.
    length: int
    #: Optional MD5 checksum of the contig sequence.
    md5: typing.Optional[str] = None

    def is_same_sequence(self, other: "SequenceRecord") -> bool:
        """Compare name and length, MD5 only when both records have one."""
        if (self.name, self.length) != (other.name, other.length):
            return False
        if self.md5 and other.md5:
            return self.md5.lower() == other.md5.lower()
        return True

    def as_header_line(self) -> str:
        fields = ["@SQ", f"SN:{self.name}", f"LN:{self.length}"]
        if self.md5:
            fields.append(f"M5:{self.md5}")
        return "\t".join(fields)


@attr.s(frozen=True, auto_attribs=True)
class SequenceDictionary:
    """Ordered collection of contigs, the coordinate system of all intervals in a table."""

    #: The contig records, in header order.
    records: typing.Tuple[SequenceRecord, ...]

    @staticmethod
    def from_header_lines(lines: typing.Iterable[str]) -> "SequenceDictionary":
        """Build from the ``@``-prefixed header lines of a file, non-``@SQ`` lines are skipped."""
        records = []
        for line in lines:
            m = PATTERN_DICT.match(line.rstrip("\r\n"))
            if not m:
                continue
            tags = dict(
                field.split(":", 1) for field in m.group("fields").split("\t") if ":" in field
            )
            if "SN" not in tags or "LN" not in tags:
                raise ValueError(f"Invalid @SQ header line: {line.strip()}")
            records.append(SequenceRecord(tags["SN"], int(tags["LN"]), tags.get("M5")))
        names = [record.name for record in records]
        if len(names) != len(set(names)):
            raise ValueError("Sequence dictionary contains duplicate contig names")
        return SequenceDictionary(tuple(records))

    @property
    def names(self) -> typing.List[str]:
        return [record.name for record in self.records]

    def header_lines(self) -> typing.List[str]:
        """Return ``@HD`` and ``@SQ`` header lines"""
        return [f"@HD\tVN:{SAM_HEADER_VERSION}"] + [r.as_header_line() for r in self.records]

    def is_same_dictionary(self, other: "SequenceDictionary") -> bool:
        """Exact comparison: same contigs with the same lengths in the same order."""
        if self is other:
            return True
        if len(self.records) != len(other.records):
            return False
        return all(a.is_same_sequence(b) for a, b in zip(self.records, other.records))

    @functools.cached_property
    def _index(self) -> typing.Dict[str, int]:
        return {record.name: i for i, record in enumerate(self.records)}

    def contig_index(self, name: str) -> int:
        return self._index[name]

    def length_of(self, name: str) -> int:
        return self.records[self.contig_index(name)].length

    def contains_region(self, region: GenomeRegion) -> bool:
        """Return whether ``region`` is a valid region on a contig of this dictionary"""
        if region not in self:
            return False
        return 0 <= region.begin < region.end <= self.length_of(region.chrom)

    def sort_key(self, region: GenomeRegion) -> typing.Tuple[int, int, int]:
        """Key for sorting regions in dictionary order"""
        return (self.contig_index(region.chrom), region.begin, region.end)

    def __contains__(self, item) -> bool:
        name = item.chrom if isinstance(item, GenomeRegion) else item
        return name in self._index

    def __len__(self) -> int:
        return len(self.records)
