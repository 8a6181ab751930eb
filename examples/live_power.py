#!/usr/bin/env python3
"""
Print live and hourly power readings from a Neurio sensor.

Credentials are read from the environment:
    NEURIO_KEY        - client ID of your API application
    NEURIO_SECRET     - client secret of your API application
    NEURIO_SENSOR_ID  - ID of the sensor, e.g. 0x0000C47F510179B0
    NEURIO_BASE_URL   - optional, defaults to the staging API

Usage:
    python live_power.py
"""

import asyncio
import json
import logging
import os
import sys
from datetime import datetime, timedelta, timezone

from aioneurio import BASE_URL, Neurio, NeurioError


async def main() -> None:
    """Connect to the Neurio API and print recent readings."""
    logging.basicConfig(
        level=logging.DEBUG if os.environ.get("NEURIO_DEBUG") else logging.INFO
    )

    try:
        key = os.environ["NEURIO_KEY"]
        secret = os.environ["NEURIO_SECRET"]
        sensor_id = os.environ["NEURIO_SENSOR_ID"]
    except KeyError as e:
        print(f"Error: {e.args[0]} is not set")
        sys.exit(1)

    base_url = os.environ.get("NEURIO_BASE_URL", str(BASE_URL))

    async with Neurio(key, secret, sensor_id, base_url=base_url) as client:
        try:
            await client.connect()

            print("Last live sample:")
            print(json.dumps(await client.fetch_last_live(), indent=2))
            print()

            start = datetime.now(timezone.utc) - timedelta(days=1)
            samples = await client.fetch_samples(start, "hours")
            print(f"Hourly samples since {start:%Y-%m-%d %H:%M} UTC:")
            for sample in samples:
                print(f"  {sample['timestamp']}: {sample['consumptionPower']} W")

        except NeurioError as e:
            print(f"Error: {e}")
            sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
