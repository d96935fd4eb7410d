from typing import Optional

from fastapi import APIRouter, Query, Request

router = APIRouter()


@router.get('/api/alerts')
def api_alerts(
    request: Request,
    since: Optional[int] = Query(default=None, description="Return alerts with id greater than this value"),
    connect: Optional[str] = Query(default=None, description="Only alerts for this household"),
):
    """
    Return recent stock alerts (low stock, insufficient stock).

    Client polling strategy:
        1. First call without 'since' to load the current backlog.
        2. Store 'next_cursor' from the response.
        3. Subsequent polls: /api/alerts?since=<next_cursor>
    """
    return request.app.state.services.alerts.get_events(since, connect=connect)
