from __future__ import annotations

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator


def instrument_metrics(app: FastAPI) -> None:
    Instrumentator(excluded_handlers=["/health", "/metrics"]).instrument(app).expose(app, endpoint="/metrics")
