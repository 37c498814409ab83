"""
Prometheus metrics endpoint.

Public, unauthenticated, following standard Prometheus practice. Exposes
the private registry fed by ``@measure_operation`` and the admission engine.
"""

from fastapi import APIRouter, Response

from ...monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
