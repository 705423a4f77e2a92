# -*- coding: utf-8 -*-
"""Auth: users, profiles, password hashing and JWT sessions."""
