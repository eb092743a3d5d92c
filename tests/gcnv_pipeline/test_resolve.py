# -*- coding: utf-8 -*-
"""Tests for ``gcnv_pipeline.resolve``"""

import pytest

from gcnv_pipeline.exceptions import InvalidConfiguration
from gcnv_pipeline.models.gcnv import EngineConfig
from gcnv_pipeline.models.run import CaseRun, CohortRun, IntervalRequest
from gcnv_pipeline.resolve import find_duplicates, resolve_run_configuration

A = "/data/counts/a.tsv"
B = "/data/counts/b.tsv"


def resolve(run_mode="COHORT", read_count_files=(A, B), **kwargs):
    kwargs.setdefault("contig_ploidy_calls", "/data/ploidy-calls")
    kwargs.setdefault("output_dir", "/data/out")
    kwargs.setdefault("output_prefix", "run")
    return resolve_run_configuration(run_mode, read_count_files, **kwargs)


def test_find_duplicates(gcnv_fs):
    assert find_duplicates([A, B]) == []
    assert find_duplicates([A, B, "/data/counts/../counts/a.tsv"]) == [
        "/data/counts/a.tsv",
        "/data/counts/../counts/a.tsv",
    ]


def test_resolve_cohort(gcnv_fs):
    config = resolve(annotated_intervals="/data/annotated.tsv")
    assert isinstance(config, CohortRun)
    assert config.read_count_files == [A, B]
    assert config.explicit_gc_bias_modeling
    assert config.engine == EngineConfig()


def test_resolve_cohort_with_intervals(gcnv_fs):
    config = resolve(intervals=IntervalRequest(intervals=["1"]))
    assert config.intervals.intervals == ["1"]


def test_resolve_cohort_with_model(gcnv_fs, mocker):
    mock_logger = mocker.patch("gcnv_pipeline.resolve.logger")
    config = resolve(model="/data/model", annotated_intervals="/data/annotated.tsv")
    assert config.model == "/data/model"
    assert not config.explicit_gc_bias_modeling
    messages = [call.args[0] for call in mock_logger.info.call_args_list]
    assert any("advanced feature" in msg for msg in messages)


def test_resolve_case(gcnv_fs):
    config = resolve("CASE", [A], model="/data/model")
    assert isinstance(config, CaseRun)
    assert config.model == "/data/model"


@pytest.mark.parametrize(
    "args,kwargs,message",
    [
        (("COHORT", [A]), {}, "At least two samples must be provided in the COHORT mode"),
        (("COHORT", [A, A]), {}, "cannot contain duplicates"),
        (("COHORT", []), {}, "At least one read-count file"),
        (("COHORT", [A, "/data/counts/missing.tsv"]), {}, "does not exist or is not readable"),
        (("CASE", [A]), {}, "must be provided in the CASE mode"),
        (
            ("CASE", [A]),
            {"model": "/data/model", "intervals": IntervalRequest(intervals=["1"])},
            "but intervals were provided",
        ),
        (
            ("CASE", [A]),
            {"model": "/data/model", "annotated_intervals": "/data/annotated.tsv"},
            "but annotated intervals were provided",
        ),
        (("CASE", [A]), {"model": "/data/missing-model"}, "does not exist"),
        (("GERMLINE", [A, B]), {}, "Invalid run mode"),
        (("COHORT", [A, B]), {"output_prefix": ""}, "Output prefix must not be empty"),
        (("COHORT", [A, B]), {"output_prefix": "/tmp/run"}, "must not contain a path separator"),
        (("COHORT", [A, B]), {"output_prefix": "sub/run"}, "must not contain a path separator"),
        (("COHORT", [A, B]), {"output_dir": "/data/missing"}, "Output directory"),
        (("COHORT", [A, B]), {"contig_ploidy_calls": "/data/missing"}, "contig-ploidy calls"),
        (
            ("COHORT", [A, B]),
            {"annotated_intervals": "/data/missing.tsv"},
            "Annotated-intervals file",
        ),
    ],
)
def test_resolve_invalid(gcnv_fs, args, kwargs, message):
    with pytest.raises(InvalidConfiguration, match=message):
        resolve(*args, **kwargs)


def test_resolve_duplicates_before_mode(gcnv_fs):
    # checked before the mode rules
    with pytest.raises(InvalidConfiguration, match="cannot contain duplicates"):
        resolve("CASE", [A, A])
