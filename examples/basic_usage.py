"""
Basic usage example for digestlog.

A batch job records whatever goes wrong while it runs; the operators get one
email at the end instead of one per problem. Uses an in-memory transport so
the example runs without an SMTP server.
"""

import logging
import time

from digestlog import (
    AggregatingSink,
    MemoryTransport,
    StaticSiteIdentity,
    UnitOfWork,
    enable_stdlib_bridge,
)


def main() -> None:
    transport = MemoryTransport()
    site = StaticSiteIdentity("Nightly Import", "https://import.example.com/admin")

    with UnitOfWork("nightly-import") as work:
        sink = AggregatingSink(
            ["ops@example.com"],
            "warning",
            transport=transport,
            site=site,
            lifecycle=work,
        )

        # Direct calls
        sink.record(time.time(), "info", "import started", "importer")
        sink.record(
            time.time(),
            "error",
            "row rejected",
            "importer",
            {"row": 1042, "reason": "missing sku"},
        )

        # Existing stdlib logging call sites
        logger = logging.getLogger("importer.prices")
        enable_stdlib_bridge(sink, logger=logger)
        logger.warning("price feed stale by %d minutes", 42)

    sent = transport.last
    if sent is not None:
        print(sent.subject)
        print()
        print(sent.body)


if __name__ == "__main__":
    main()
