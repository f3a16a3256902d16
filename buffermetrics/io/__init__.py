# -*- coding: utf-8 -*-
"""The io package contains modules for reading and writing landcover rasters, site vectors and result tables.

It abstracts file operations and coordinate system handling to facilitate I/O tasks.
"""
