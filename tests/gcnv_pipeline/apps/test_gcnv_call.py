# -*- coding: utf-8 -*-
"""Tests for ``gcnv_pipeline.apps.gcnv_call``"""

import pytest

from gcnv_pipeline.apps import gcnv_call
from gcnv_pipeline.engine import EngineResult
from gcnv_pipeline.exceptions import DataConsistencyError, EngineFailure
from gcnv_pipeline.models.run import CaseRun, CohortRun

COMMON_ARGS = [
    "--contig-ploidy-calls",
    "/data/ploidy-calls",
    "--output",
    "/data/out",
    "--output-prefix",
    "run",
]
COHORT_ARGS = ["--run-mode", "COHORT", "-I", "/data/counts/a.tsv", "-I", "/data/counts/b.tsv"]


@pytest.fixture
def mock_run(mocker):
    return mocker.patch(
        "gcnv_pipeline.apps.gcnv_call.run_germline_cnv_caller",
        return_value=EngineResult(("python",), 0),
    )


def test_print_default_config(capsys):
    assert gcnv_call.main(["--print-default-config"]) == 0
    out, _ = capsys.readouterr()
    assert "denoising:" in out
    assert "python_executable: python" in out


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        gcnv_call.main(["--version"])
    assert excinfo.value.code == 0


@pytest.mark.parametrize(
    "argv",
    [
        COMMON_ARGS + ["-I", "/data/counts/a.tsv"],
        ["--run-mode", "COHORT", "-I", "/data/counts/a.tsv", "--output", "/data/out"],
        ["--run-mode", "COHORT"] + COMMON_ARGS,
        ["--run-mode", "GERMLINE"] + COMMON_ARGS + ["-I", "/data/counts/a.tsv"],
    ],
)
def test_missing_arguments(argv):
    with pytest.raises(SystemExit) as excinfo:
        gcnv_call.main(argv)
    assert excinfo.value.code == 2


def test_cohort(gcnv_fs, mock_run):
    argv = COHORT_ARGS + COMMON_ARGS + ["--annotated-intervals", "/data/annotated.tsv"]
    assert gcnv_call.main(argv + ["--tmp-dir", "/data/work"]) == 0
    config = mock_run.call_args.args[0]
    assert isinstance(config, CohortRun)
    assert config.read_count_files == ["/data/counts/a.tsv", "/data/counts/b.tsv"]
    assert config.annotated_intervals == "/data/annotated.tsv"
    assert mock_run.call_args.kwargs == {"tmp_dir": "/data/work"}


def test_cohort_intervals(gcnv_fs, mock_run):
    argv = COHORT_ARGS + COMMON_ARGS + ["-L", "1:1-1000", "-L", "2", "-XL", "2:1-10"]
    assert gcnv_call.main(argv) == 0
    config = mock_run.call_args.args[0]
    assert config.intervals.intervals == ["1:1-1000", "2"]
    assert config.intervals.exclude_intervals == ["2:1-10"]


def test_case(gcnv_fs, mock_run):
    argv = ["--run-mode", "CASE", "-I", "/data/counts/c.tsv", "--model", "/data/model"]
    assert gcnv_call.main(argv + COMMON_ARGS) == 0
    config = mock_run.call_args.args[0]
    assert isinstance(config, CaseRun)
    assert config.model == "/data/model"


def test_engine_config(gcnv_fs, mock_run):
    gcnv_fs.create_file("/data/engine.yaml", contents="num_threads: 2\ncalling:\n  p_alt: 1.0e-4\n")
    argv = COHORT_ARGS + COMMON_ARGS + ["--config", "/data/engine.yaml", "--threads", "8"]
    argv += ["--engine-script-dir", "/opt/gcnv", "--python-executable", "python3"]
    assert gcnv_call.main(argv) == 0
    engine = mock_run.call_args.args[0].engine
    assert engine.num_threads == 8
    assert engine.calling.p_alt == 1e-4
    assert engine.script_dir == "/opt/gcnv"
    assert engine.python_executable == "python3"


@pytest.mark.parametrize(
    "extra_args,message",
    [
        (["-XL", "1"], "require intervals"),
        (["-L", "1", "--interval-padding", "10"], "Interval padding must be set to 0"),
        (["-L", "1", "--interval-merging-rule", "ALL"], "OVERLAPPING_ONLY"),
        (["--threads", "0"], "Invalid engine settings"),
        (["--config", "/data/missing.yaml"], "Could not read configuration file"),
        (["-I", "/data/counts/a.tsv"], "cannot contain duplicates"),
    ],
)
def test_invalid_configuration(gcnv_fs, mock_run, capsys, extra_args, message):
    assert gcnv_call.main(COHORT_ARGS + COMMON_ARGS + extra_args) == 1
    _, err = capsys.readouterr()
    assert "ERROR" in err
    assert message in err
    mock_run.assert_not_called()


def test_case_with_intervals(gcnv_fs, mock_run, capsys):
    argv = ["--run-mode", "CASE", "-I", "/data/counts/c.tsv", "--model", "/data/model"]
    assert gcnv_call.main(argv + COMMON_ARGS + ["-L", "1"]) == 1
    _, err = capsys.readouterr()
    assert "Invalid combination of inputs" in err


def test_data_consistency_error(gcnv_fs, mock_run, capsys):
    mock_run.side_effect = DataConsistencyError("Broken file", "/data/counts/b.tsv")
    assert gcnv_call.main(COHORT_ARGS + COMMON_ARGS) == 1
    _, err = capsys.readouterr()
    assert "Broken file" in err
    assert "offending file: /data/counts/b.tsv" in err


def test_engine_failure(gcnv_fs, mock_run, capsys):
    result = EngineResult(("python",), 3, ("Traceback", "MemoryError"))
    mock_run.side_effect = EngineFailure("Python return code was non-zero.", result)
    assert gcnv_call.main(COHORT_ARGS + COMMON_ARGS) == 1
    _, err = capsys.readouterr()
    assert "Python return code was non-zero." in err
    assert "engine return code: 3" in err
    assert "MemoryError" in err


def test_missing_tmp_dir(gcnv_fs, mocker, capsys):
    mocker.patch("gcnv_pipeline.pipeline.locate_script", return_value="/opt/gcnv/script.py")
    argv = COHORT_ARGS + COMMON_ARGS + ["--tmp-dir", "/does/not/exist"]
    assert gcnv_call.main(argv) == 1
    _, err = capsys.readouterr()
    assert "Could not create work directory below /does/not/exist" in err
