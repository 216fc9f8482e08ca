"""Tests for the live row websocket."""

import asyncio
from types import SimpleNamespace

from wigle_bluetooth.api.ws.events_ws import events_ws
from wigle_bluetooth.core.bus.event_bus import EventBus
from wigle_bluetooth.core.scan.correlator import TOPIC_DEVICE_LOGGED


class FakeWebSocket:
    """Records sends; receive() blocks until the client hangs up."""

    def __init__(self):
        self.accepted = False
        self.sent = []
        self.listening = asyncio.Event()
        self.gone = asyncio.Event()

    async def accept(self):
        self.accepted = True

    async def receive(self):
        self.listening.set()
        await self.gone.wait()
        return {"type": "websocket.disconnect", "code": 1000}

    async def send_json(self, data):
        self.sent.append(data)


class TestEventsWebSocket:
    """Tests for /ws/events."""

    def test_rows_forwarded(self):
        async def go():
            bus = EventBus()
            ws = FakeWebSocket()
            task = asyncio.create_task(events_ws(ws, SimpleNamespace(bus=bus)))
            await ws.listening.wait()

            bus.publish_nowait(TOPIC_DEVICE_LOGGED, {"MAC": "AA:BB:CC:DD:EE:FF"})
            for _ in range(100):
                if ws.sent:
                    break
                await asyncio.sleep(0)

            ws.gone.set()
            await asyncio.wait_for(task, timeout=1)
            return ws

        ws = asyncio.run(go())
        assert ws.accepted
        assert ws.sent == [{"topic": TOPIC_DEVICE_LOGGED, "row": {"MAC": "AA:BB:CC:DD:EE:FF"}}]

    def test_idle_client_disconnect_unsubscribes(self):
        async def go():
            bus = EventBus()
            ws = FakeWebSocket()
            task = asyncio.create_task(events_ws(ws, SimpleNamespace(bus=bus)))
            await ws.listening.wait()

            # nothing is ever published; the handler must still notice
            ws.gone.set()
            await asyncio.wait_for(task, timeout=1)
            return bus, ws

        bus, ws = asyncio.run(go())
        assert ws.sent == []
        assert bus._subs[TOPIC_DEVICE_LOGGED] == []
