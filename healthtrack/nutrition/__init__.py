# -*- coding: utf-8 -*-
"""Nutrition: meals with itemized macros, water intake and AI nutrition insights."""
