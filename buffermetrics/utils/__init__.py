# -*- coding: utf-8 -*-
"""Utility helpers."""
