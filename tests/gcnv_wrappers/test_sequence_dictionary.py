# -*- coding: utf-8 -*-
"""Tests for ``gcnv_wrappers.sequence_dictionary``"""

import pytest

from gcnv_wrappers.genome_regions import GenomeRegion
from gcnv_wrappers.sequence_dictionary import SequenceDictionary, SequenceRecord

HEADER = [
    "@HD\tVN:1.6",
    "@SQ\tSN:1\tLN:1000\tM5:abc",
    "@SQ\tSN:2\tLN:500",
    "@RG\tID:GATKCopyNumber\tSM:sample",
]


@pytest.fixture
def dictionary():
    return SequenceDictionary.from_header_lines(HEADER)


def test_from_header_lines(dictionary):
    assert dictionary.records == (SequenceRecord("1", 1000, "abc"), SequenceRecord("2", 500))
    assert dictionary.names == ["1", "2"]
    assert len(dictionary) == 2
    assert dictionary.header_lines() == HEADER[:3]


def test_from_header_lines_invalid():
    with pytest.raises(ValueError):
        SequenceDictionary.from_header_lines(["@SQ\tSN:1"])
    with pytest.raises(ValueError):
        SequenceDictionary.from_header_lines(["@SQ\tSN:1\tLN:10", "@SQ\tSN:1\tLN:10"])


def test_is_same_dictionary(dictionary):
    assert dictionary.is_same_dictionary(dictionary)
    # MD5 only compared if present on both sides
    no_md5 = SequenceDictionary((SequenceRecord("1", 1000), SequenceRecord("2", 500)))
    assert dictionary.is_same_dictionary(no_md5)
    other_md5 = SequenceDictionary((SequenceRecord("1", 1000, "ABD"), SequenceRecord("2", 500)))
    assert not dictionary.is_same_dictionary(other_md5)
    reordered = SequenceDictionary((SequenceRecord("2", 500), SequenceRecord("1", 1000)))
    assert not dictionary.is_same_dictionary(reordered)
    other_length = SequenceDictionary((SequenceRecord("1", 1000), SequenceRecord("2", 501)))
    assert not dictionary.is_same_dictionary(other_length)
    assert not dictionary.is_same_dictionary(SequenceDictionary((SequenceRecord("1", 1000),)))


def test_contains(dictionary):
    assert "1" in dictionary
    assert "3" not in dictionary
    assert GenomeRegion("2", 0, 500) in dictionary
    assert dictionary.contains_region(GenomeRegion("2", 0, 500))
    assert not dictionary.contains_region(GenomeRegion("2", 0, 501))
    assert not dictionary.contains_region(GenomeRegion("2", 10, 10))
    assert not dictionary.contains_region(GenomeRegion("3", 0, 10))


def test_sort_key(dictionary):
    regions = [GenomeRegion("2", 0, 10), GenomeRegion("1", 20, 30), GenomeRegion("1", 0, 10)]
    assert sorted(regions, key=dictionary.sort_key) == [
        GenomeRegion("1", 0, 10),
        GenomeRegion("1", 20, 30),
        GenomeRegion("2", 0, 10),
    ]
    assert dictionary.length_of("2") == 500
