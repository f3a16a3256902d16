# -*- coding: utf-8 -*-
"""The core package encompasses the data structures and the extraction procedure of buffermetrics.

It defines landcover layers and stacks, sample sites, run configuration and the multi-scale extractor.
"""
