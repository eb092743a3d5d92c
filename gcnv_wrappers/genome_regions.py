# -*- coding: utf-8 -*-
"""Code for genome regions"""

import re

import attr

#: Regular expression for human-readable region strings
PATTERN_REGION = re.compile(r"^(?P<chrom>.+?):(?P<start>[0-9]+)(-(?P<end>[0-9]+))?$")


@attr.s(frozen=True, auto_attribs=True, order=False)
class GenomeRegion:
    """Genome region with half-open intervals"""

    #: The chromosome/contig name.
    chrom: str
    #: The 0-based begin position.
    begin: int
    #: The 0-based end position (exclusive).
    end: int

    @staticmethod
    def from_bed_line(line):
        """Return GenomeRegion from BED line, extra columns are ignored"""
        chrom, begin, end = line.strip().split("\t")[:3]
        return GenomeRegion(chrom, int(begin), int(end))

    @staticmethod
    def from_one_based(chrom, start, end):
        """Return GenomeRegion from 1-based, closed coordinates as used in the TSV formats"""
        return GenomeRegion(chrom, int(start) - 1, int(end))

    @staticmethod
    def from_human_readable(human_readable):
        """Parse human-readable genome description into ``GenomeRegion``

        A single position (``chr:pos``) yields a region of length one.
        """
        human_readable = human_readable.replace(",", "")
        m = PATTERN_REGION.match(human_readable)
        if not m:
            raise ValueError("Invalid region string: {}".format(human_readable))
        start = int(m.group("start"))
        end = int(m.group("end")) if m.group("end") else start
        return GenomeRegion(m.group("chrom"), start - 1, end)

    @property
    def one_based_start(self):
        """Return 1-based start position"""
        return self.begin + 1

    def as_tsv_fields(self):
        """Return ``[contig, start, end]`` in 1-based closed coordinates"""
        return [self.chrom, str(self.one_based_start), str(self.end)]

    def human_readable(self, with_comma=True):
        """Return human readable string"""
        if with_comma:
            tpl = "{}:{:,}-{:,}"
        else:
            tpl = "{}:{:}-{:}"
        return tpl.format(self.chrom, self.begin + 1, self.end)

    @property
    def length(self):
        """Return length"""
        return self.end - self.begin

    def overlaps(self, other):
        """Return whether the region overlaps with ``other``"""
        if self.chrom != other.chrom:
            return False
        return self.begin < other.end and other.begin < self.end

    def abuts(self, other):
        """Return whether the region directly touches ``other`` without overlapping"""
        if self.chrom != other.chrom:
            return False
        return self.end == other.begin or other.end == self.begin

    def extend(self, by):
        """Extend genome region at both sides by ``by``"""
        return GenomeRegion(self.chrom, max(0, self.begin - by), self.end + by)

    def merge(self, other):
        """Return the smallest region spanning ``self`` and ``other``"""
        if self.chrom != other.chrom:
            raise ValueError("Cannot merge regions on different contigs: {} {}".format(self, other))
        return GenomeRegion(self.chrom, min(self.begin, other.begin), max(self.end, other.end))

    def subtract(self, other):
        """Return list of zero, one or two regions left after removing ``other`` from ``self``"""
        if not self.overlaps(other):
            return [self]
        result = []
        if self.begin < other.begin:
            result.append(GenomeRegion(self.chrom, self.begin, other.begin))
        if other.end < self.end:
            result.append(GenomeRegion(self.chrom, other.end, self.end))
        return result

    def __str__(self):
        tpl = "GenomeRegion({}, {}, {})"
        return tpl.format(*list(map(repr, [self.chrom, self.begin, self.end])))
