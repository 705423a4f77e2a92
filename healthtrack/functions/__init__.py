# -*- coding: utf-8 -*-
"""JSON-in/JSON-out AI function endpoints (process-exam, nutrition-ai, generate-workout)."""
