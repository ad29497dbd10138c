"""
FastAPI example: one digest per request.

Run with ``uvicorn examples.fastapi_app:app`` after setting, for example::

    DIGESTLOG_SITE__NAME=Shop
    DIGESTLOG_SITE__ADMIN_EMAIL=ops@example.com
    DIGESTLOG_SMTP__HOST=mail.example.com
    DIGESTLOG_SINK__THRESHOLD=error
"""

import logging
import time

from fastapi import Depends, FastAPI

import digestlog
from digestlog import AggregatingSink, UnitOfWork, enable_stdlib_bridge
from digestlog.fastapi import DigestMiddleware, get_request_sink

app = FastAPI()

# One transport (and connection pool) shared by every request
transport = digestlog.build_transport()


def sink_for_request(work: UnitOfWork) -> AggregatingSink:
    return digestlog.get_sink(lifecycle=work, transport=transport)


app.add_middleware(
    DigestMiddleware, sink_factory=sink_for_request, skip_paths=["/health"]
)

# Root handler follows whichever sink the current request bound
enable_stdlib_bridge(level=logging.WARNING)


@app.get("/orders/{order_id}")
async def get_order(
    order_id: int, sink: AggregatingSink = Depends(get_request_sink)
) -> dict:
    if order_id < 0:
        sink.record(time.time(), "error", "negative order id", "shop.orders")
    elif order_id == 0:
        logging.getLogger("shop.orders").error("order 0 requested")
    return {"order_id": order_id}


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
