# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/__init__.py

Jobs programados usando APScheduler.

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from .scheduler_service import SchedulerService

__all__ = ["SchedulerService"]
