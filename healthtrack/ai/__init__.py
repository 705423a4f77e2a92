# -*- coding: utf-8 -*-
"""LLM gateway client and the prompt tasks built on it."""
