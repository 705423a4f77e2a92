# -*- coding: utf-8 -*-
"""Cross-domain headline numbers for the home screen."""
