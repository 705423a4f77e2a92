# -*- coding: utf-8 -*-
"""Health markers, their recorded values and trend alerts."""
