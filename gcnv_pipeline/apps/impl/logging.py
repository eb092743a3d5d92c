# -*- coding: utf-8 -*-
"""Helper code for user-facing messages of the command line tools"""

import logging
import sys

import logzero
from termcolor import colored

from gcnv_pipeline.exceptions import DataConsistencyError, EngineFailure

#: Message level: ERROR
LVL_ERROR = "ERROR"

#: Message level: INFO
LVL_INFO = "INFO"

#: Message level: IMPORTANT
LVL_IMPORTANT = "IMPORTANT"

#: Message level: SUCCESS
LVL_SUCCESS = "SUCCESS"

#: Prefix color per message level
PREFIX_COLORS = {LVL_ERROR: "red", LVL_INFO: "yellow", LVL_SUCCESS: "green"}


def log(msg, args=None, level=None, file=None):
    """Print log message for given levels of importance

    For LVL_ERROR, LVL_INFO, LVL_SUCCESS, the message will be prefixed with a colored keyword
    identifying the level.  For IMPORTANT, the message itself will be colored.
    """
    args = args or {}
    file = file or sys.stderr
    if level == LVL_IMPORTANT:
        print(colored(msg.format(**args), "yellow"), file=file)
    elif level in PREFIX_COLORS:
        prefix = colored(f"{level}: ", PREFIX_COLORS[level], attrs=["bold"])
        print(prefix, msg.format(**args), sep="", file=file)
    else:
        print(msg.format(**args), file=file)


def log_failure(exc, file=None):
    """Print error message for ``exc`` including the offending file or engine output"""
    log("{msg}", args={"msg": exc}, level=LVL_ERROR, file=file)
    if isinstance(exc, DataConsistencyError) and exc.path:
        log("offending file: {path}", args={"path": exc.path}, file=file)
    elif isinstance(exc, EngineFailure) and exc.result is not None:
        log("engine return code: {rc}", args={"rc": exc.result.returncode}, file=file)
        for line in exc.result.diagnostics:
            log("  {line}", args={"line": line}, file=file)


def setup_logging(verbose=False):
    """Setup logzero logger of the library modules"""
    logzero.loglevel(logging.DEBUG if verbose else logging.INFO)
