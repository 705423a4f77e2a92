# -*- coding: utf-8 -*-
"""Stage-then-commit imports of AI-extracted exams, workouts and meals."""
