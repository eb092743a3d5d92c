# -*- coding: utf-8 -*-

from gcnv_pipeline._version import __version__

__all__ = ["__version__"]
