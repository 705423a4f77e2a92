# -*- coding: utf-8 -*-
"""Workouts, their exercises and check-ins."""
