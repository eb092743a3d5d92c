# -*- coding: utf-8 -*-
"""Tests for ``gcnv_pipeline.apps.impl.logging``"""

import io

from gcnv_pipeline.apps.impl.logging import LVL_ERROR, LVL_SUCCESS, log, log_failure
from gcnv_pipeline.exceptions import InvalidConfiguration


def test_log_plain():
    out = io.StringIO()
    log("hello {name}", args={"name": "world"}, file=out)
    assert out.getvalue() == "hello world\n"


def test_log_levels():
    out = io.StringIO()
    log("failed", level=LVL_ERROR, file=out)
    log("done", level=LVL_SUCCESS, file=out)
    lines = out.getvalue().splitlines()
    assert "ERROR: " in lines[0] and lines[0].endswith("failed")
    assert "SUCCESS: " in lines[1] and lines[1].endswith("done")


def test_log_failure_braces():
    out = io.StringIO()
    log_failure(InvalidConfiguration("Invalid value {x}"), file=out)
    assert out.getvalue().endswith("Invalid value {x}\n")
