"""Reconciliation components built on the validated entity writer."""

from __future__ import annotations

from .atomic import run_atomically
from .compound import CompoundWriter
from .derivation import fill_reached_at, utcnow
from .reconcile_or_create import ReconcileOrCreate
from .set_reconciler import SetReconciler, SetReconciliationResult
from .writer import ValidatedEntityWriter

__all__ = [
    "CompoundWriter",
    "ReconcileOrCreate",
    "SetReconciler",
    "SetReconciliationResult",
    "ValidatedEntityWriter",
    "fill_reached_at",
    "run_atomically",
    "utcnow",
]
