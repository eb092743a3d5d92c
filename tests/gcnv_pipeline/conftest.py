# -*- coding: utf-8 -*-
"""Shared fixtures for the gCNV pipeline unit tests"""

import pytest

#: Contigs of the default sequence dictionary
CONTIGS = (("1", 10000), ("2", 5000))

#: Intervals of the default read-count files, 1-based closed
INTERVALS = (("1", 1, 1000), ("1", 1001, 2000), ("2", 1, 1000))


def _header_lines(contigs=CONTIGS):
    return ["@HD\tVN:1.6"] + [f"@SQ\tSN:{name}\tLN:{length}" for name, length in contigs]


def make_counts_tsv(sample, intervals=INTERVALS, contigs=CONTIGS, count=10):
    """Return content of read-count file"""
    lines = _header_lines(contigs) + [f"@RG\tID:GATKCopyNumber\tSM:{sample}"]
    lines.append("CONTIG\tSTART\tEND\tCOUNT")
    lines += [
        f"{chrom}\t{start}\t{end}\t{count + i}" for i, (chrom, start, end) in enumerate(intervals)
    ]
    return "\n".join(lines) + "\n"


def make_intervals_tsv(intervals=INTERVALS, contigs=CONTIGS, gc_content=None):
    """Return content of (annotated) interval file"""
    lines = _header_lines(contigs)
    if gc_content is None:
        lines.append("CONTIG\tSTART\tEND")
        lines += [f"{chrom}\t{start}\t{end}" for chrom, start, end in intervals]
    else:
        lines.append("CONTIG\tSTART\tEND\tGC_CONTENT")
        lines += [
            f"{chrom}\t{start}\t{end}\t{gc}"
            for (chrom, start, end), gc in zip(intervals, gc_content)
        ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def gcnv_fs(fs):
    """Return fake file system with read counts, ploidy calls, output and model directories"""
    fs.create_file("/data/counts/a.tsv", contents=make_counts_tsv("a"))
    fs.create_file("/data/counts/b.tsv", contents=make_counts_tsv("b"))
    # one extra interval
    fs.create_file(
        "/data/counts/c.tsv", contents=make_counts_tsv("c", INTERVALS + (("2", 1001, 2000),))
    )
    fs.create_file(
        "/data/annotated.tsv",
        contents=make_intervals_tsv(
            INTERVALS + (("2", 1001, 2000),), gc_content=(0.5, 0.25, 0.75, 0.4)
        ),
    )
    fs.create_file(
        "/data/model/interval_list.tsv", contents=make_intervals_tsv(INTERVALS[:2])
    )
    fs.create_dir("/data/ploidy-calls")
    fs.create_dir("/data/out")
    fs.create_dir("/data/work")
    return fs


@pytest.fixture
def counts_tsv():
    """Return function building read-count file content"""
    return make_counts_tsv


@pytest.fixture
def intervals_tsv():
    """Return function building (annotated) interval file content"""
    return make_intervals_tsv
