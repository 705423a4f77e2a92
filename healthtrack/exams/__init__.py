# -*- coding: utf-8 -*-
"""Exams: marker values grouped by collection date."""
