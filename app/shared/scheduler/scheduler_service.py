# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/scheduler_service.py

Servicio de programación de tareas periódicas usando APScheduler.
Lo usa billing para el barrido de entitlements pendientes.

Autor: Equipo Billing
Fecha: 2026-09-03
"""

import logging
from typing import Any, Callable, Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class SchedulerService:
    """
    Envoltura mínima sobre AsyncIOScheduler.

    - Una instancia por job (max_instances=1) y ejecuciones perdidas
      combinadas (coalesce) para que un barrido lento no se solape.
    - Zona horaria UTC.
    """

    def __init__(self):
        self._scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            executors={"default": AsyncIOExecutor()},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 30,
            },
            timezone="UTC",
        )
        self._started = False

    def start(self) -> None:
        if not self._started:
            self._scheduler.start()
            self._started = True
            logger.info("scheduler_started jobs=%d", len(self._scheduler.get_jobs()))

    def shutdown(self, wait: bool = True) -> None:
        """
        Detiene el scheduler.

        Args:
            wait: Si True, espera a que terminen los jobs en ejecución
        """
        if self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False
            logger.info("scheduler_stopped")

    def add_interval_job(
        self,
        func: Callable[..., Any],
        job_id: str,
        minutes: int = 0,
        seconds: int = 0,
        **kwargs: Any,
    ) -> str:
        """
        Agrega (o reemplaza) un job que se ejecuta a intervalos regulares.

        Args:
            func: Corrutina o función a ejecutar
            job_id: ID único del job
            minutes: Intervalo en minutos
            seconds: Intervalo en segundos
            **kwargs: Argumentos para func

        Returns:
            ID del job agregado
        """
        self._scheduler.add_job(
            func=func,
            trigger=IntervalTrigger(minutes=minutes, seconds=seconds),
            id=job_id,
            name=job_id,
            replace_existing=True,
            kwargs=kwargs,
        )
        logger.info("scheduler_job_added id=%s every=%dm%ds", job_id, minutes, seconds)
        return job_id

    def remove_job(self, job_id: str) -> bool:
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            logger.warning("scheduler_job_missing id=%s", job_id)
            return False
        logger.info("scheduler_job_removed id=%s", job_id)
        return True

    def get_job_status(self, job_id: str) -> Optional[dict]:
        """Dict con id, next_run y trigger del job, o None si no existe."""
        job = self._scheduler.get_job(job_id)
        if job is None:
            return None
        return {
            "id": job.id,
            "name": job.name,
            "next_run": getattr(job, "next_run_time", None),
            "trigger": str(job.trigger),
        }

    @property
    def is_running(self) -> bool:
        return self._started and self._scheduler.running


__all__ = ["SchedulerService"]

# Fin del archivo backend/app/shared/scheduler/scheduler_service.py
