# -*- coding: utf-8 -*-
"""Invocation of the external denoising and calling engine

The engine consists of two Python scripts (one per run mode) of the ``gcnvkernel`` package.
It is run once per run as a blocking child process; there is no retry.
"""

import collections
import os
import shlex
import shutil
import subprocess
import typing

import attr
from logzero import logger

from gcnv_pipeline.exceptions import EngineFailure, InvalidConfiguration
from gcnv_pipeline.models.common import RunMode
from gcnv_pipeline.models.gcnv import EngineConfig
from gcnv_pipeline.models.run import RunConfiguration

#: Engine script for the COHORT mode
COHORT_DENOISING_CALLING_PYTHON_SCRIPT = "cohort_denoising_calling.py"
#: Engine script for the CASE mode
CASE_SAMPLE_CALLING_PYTHON_SCRIPT = "case_denoising_calling.py"

#: Suffix of the output model directory
MODEL_PATH_SUFFIX = "-model"
#: Suffix of the output calls directory
CALLS_PATH_SUFFIX = "-calls"

#: Marker argument preceding the read-count files
READ_COUNT_FILES_ARGUMENT = "--read_count_tsv_files"

#: Number of trailing engine output lines kept for diagnostics
DIAGNOSTIC_LINES = 50

#: Script to run per mode
SCRIPTS = {
    RunMode.COHORT: COHORT_DENOISING_CALLING_PYTHON_SCRIPT,
    RunMode.CASE: CASE_SAMPLE_CALLING_PYTHON_SCRIPT,
}


@attr.s(frozen=True, auto_attribs=True)
class EngineInvocation:
    """Everything needed to run the engine once."""

    #: Name of the engine script.
    script: str
    #: The ``--key=value`` configuration arguments, by key.
    arguments: typing.Dict[str, str]
    #: Paths of the subsetted read-count files.
    read_count_files: typing.Tuple[str, ...]
    #: Hyperparameter arguments.
    hyperparameters: typing.Tuple[str, ...] = ()

    def argv(self) -> typing.List[str]:
        """Return the script arguments"""
        return (
            [f"--{key}={value}" for key, value in self.arguments.items()]
            + [READ_COUNT_FILES_ARGUMENT]
            + list(self.read_count_files)
            + list(self.hyperparameters)
        )


@attr.s(frozen=True, auto_attribs=True)
class EngineResult:
    """Outcome of an engine run."""

    #: The executed command.
    command: typing.Tuple[str, ...]
    #: The return code of the process.
    returncode: int
    #: The last lines of output.
    diagnostics: typing.Tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return self.returncode == 0


def build_invocation(
    config: RunConfiguration, intervals_path: str, read_count_files: typing.Iterable[str]
) -> EngineInvocation:
    """Assemble the engine invocation for ``config``"""
    arguments = {
        "ploidy_calls_path": config.contig_ploidy_calls,
        "output_calls_path": os.path.join(
            config.output_dir, config.output_prefix + CALLS_PATH_SUFFIX
        ),
    }
    if config.model is not None:
        arguments["input_model_path"] = config.model
    if config.run_mode == RunMode.COHORT:
        arguments["modeling_interval_list"] = os.path.abspath(intervals_path)
        arguments["output_model_path"] = os.path.join(
            config.output_dir, config.output_prefix + MODEL_PATH_SUFFIX
        )
        arguments["enable_explicit_gc_bias_modeling"] = str(config.explicit_gc_bias_modeling)
    # in the CASE mode, explicit GC bias modeling is set by the model
    return EngineInvocation(
        script=SCRIPTS[RunMode(config.run_mode)],
        arguments=arguments,
        read_count_files=tuple(os.path.abspath(path) for path in read_count_files),
        hyperparameters=tuple(config.engine.python_arguments(RunMode(config.run_mode))),
    )


def locate_script(script: str, engine: EngineConfig) -> str:
    """Return path to ``script`` in the configured script directory or on ``PATH``"""
    if engine.script_dir:
        path = os.path.join(engine.script_dir, script)
        if not os.path.isfile(path):
            raise InvalidConfiguration(f"Engine script {path} does not exist.")
        return path
    path = shutil.which(script, mode=os.F_OK)
    if path is None:
        raise InvalidConfiguration(
            f"Engine script {script} not found on PATH; configure the script directory."
        )
    return path


def engine_environment(engine: EngineConfig, work_dir: str) -> typing.Dict[str, str]:
    """Return environment for the engine process"""
    env = dict(os.environ)
    if engine.num_threads:
        env["MKL_NUM_THREADS"] = str(engine.num_threads)
        env["OMP_NUM_THREADS"] = str(engine.num_threads)
    env.setdefault("PYTENSOR_FLAGS", f"base_compiledir={work_dir}/pytensor_compile_dir")
    env.setdefault("THEANO_FLAGS", f"base_compiledir={work_dir}/theano_compile_dir")
    return env


def run_engine(invocation: EngineInvocation, engine: EngineConfig, work_dir: str) -> EngineResult:
    """Run the engine and block until it terminates"""
    script_path = locate_script(invocation.script, engine)
    command = [engine.python_executable, script_path] + invocation.argv()
    logger.info("Executing engine: %s", shlex.join(command))
    tail = collections.deque(maxlen=DIAGNOSTIC_LINES)
    try:
        with subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
            env=engine_environment(engine, work_dir),
        ) as proc:
            for line in proc.stdout:
                line = line.rstrip("\n")
                logger.info("[engine] %s", line)
                tail.append(line)
            returncode = proc.wait()
    except OSError as e:
        raise EngineFailure(f"Could not start engine {shlex.join(command[:2])}: {e}") from e
    logger.debug("Engine terminated with return code %d", returncode)
    return EngineResult(tuple(command), returncode, tuple(tail))
