"""Protean Engine runner for the Storefront domain.

Starts the Engine that processes events asynchronously in production,
delivering OrderShipped and OrderDelivered to the notification handler.

Usage:
    python src/server.py
"""

import asyncio

from protean.server.engine import Engine

from storefront.domain import storefront
from storefront.utils.logging import configure_logging


async def run():
    storefront.init()
    engine = Engine(storefront)
    await engine.run()


def main():
    configure_logging()
    asyncio.run(run())


if __name__ == "__main__":
    main()
