# -*- coding: utf-8 -*-
"""healthtrack: personal health tracking service."""
