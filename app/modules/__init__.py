# -*- coding: utf-8 -*-
"""
backend/app/modules/__init__.py

Módulos de dominio del backend.
"""
