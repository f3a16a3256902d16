# -*- coding: utf-8 -*-
"""Maps and charts for landcover stacks, sites and extraction results."""
