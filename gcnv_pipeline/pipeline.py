# -*- coding: utf-8 -*-
"""Run orchestration: reconcile intervals, subset samples, run the engine once"""

import tempfile
import typing

from logzero import logger

from gcnv_pipeline.engine import (
    SCRIPTS,
    EngineInvocation,
    EngineResult,
    build_invocation,
    locate_script,
    run_engine,
)
from gcnv_pipeline.exceptions import EngineFailure, InvalidConfiguration
from gcnv_pipeline.models.common import RunMode
from gcnv_pipeline.models.gcnv import EngineConfig
from gcnv_pipeline.models.run import RunConfiguration
from gcnv_pipeline.reconcile import reconcile_intervals
from gcnv_pipeline.subset import subset_read_count_files

#: Signature of the function executing the engine
EngineRunner = typing.Callable[[EngineInvocation, EngineConfig, str], EngineResult]


def run_germline_cnv_caller(
    config: RunConfiguration,
    tmp_dir: typing.Optional[str] = None,
    runner: EngineRunner = run_engine,
) -> EngineResult:
    """Run denoising and CNV calling for ``config``

    Temporary files are written to a fresh ``gcnv-*`` directory below ``tmp_dir`` (or the system
    temporary directory) and are kept if the run fails.
    """
    # fail before any file is read if the engine cannot be found
    locate_script(SCRIPTS[RunMode(config.run_mode)], config.engine)

    try:
        work_dir = tempfile.mkdtemp(prefix="gcnv-", dir=tmp_dir)
    except OSError as e:
        raise InvalidConfiguration(f"Could not create work directory below {tmp_dir}: {e}") from e
    logger.debug("Using work directory %s", work_dir)

    resolved, first_counts = reconcile_intervals(config, work_dir)
    preloaded = {}
    if first_counts is not None:
        preloaded[config.read_count_files[0]] = first_counts
    sample_paths = subset_read_count_files(
        resolved.table, config.read_count_files, work_dir, preloaded
    )

    invocation = build_invocation(config, resolved.path, sample_paths)
    logger.info("Executing %s...", invocation.script)
    result = runner(invocation, config.engine, work_dir)
    if not result.success:
        raise EngineFailure("Python return code was non-zero.", result)
    logger.info("Germline denoising and CNV calling complete.")
    return result
