# -*- coding: utf-8 -*-
"""Body composition measurements (bioimpedance) with per-region segments."""
