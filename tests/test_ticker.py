import asyncio

from services.ticker import AsyncioTicker


def test_ticker_fires_until_cancelled_from_callback():
    fired = []

    async def scenario():
        done = asyncio.Event()
        ticker = None

        def on_tick():
            fired.append(True)
            if len(fired) == 3:
                ticker.cancel()
                done.set()

        ticker = AsyncioTicker(on_tick, 0.01)
        ticker.start()
        await asyncio.wait_for(done.wait(), timeout=2)
        await asyncio.sleep(0.05)
        return ticker.active

    active = asyncio.run(scenario())

    assert len(fired) == 3
    assert active is False


def test_cancel_is_idempotent_and_start_is_single():
    fired = []

    async def scenario():
        ticker = AsyncioTicker(lambda: fired.append(True), 0.01)
        ticker.start()
        ticker.start()
        await asyncio.sleep(0.035)
        ticker.cancel()
        ticker.cancel()
        count = len(fired)
        await asyncio.sleep(0.03)
        return count

    count = asyncio.run(scenario())

    assert 1 <= count <= 4
    assert len(fired) == count
