# -*- coding: utf-8 -*-
"""Supplements and their usage logs."""
