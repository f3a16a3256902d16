# -*- coding: utf-8 -*-
"""Landscape checks, buffered class-level metrics and summaries of extraction tables."""
