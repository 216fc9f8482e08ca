import asyncio
from fastapi import WebSocket, WebSocketDisconnect

from wigle_bluetooth.core.scan.correlator import TOPIC_DEVICE_LOGGED


async def _wait_disconnect(websocket: WebSocket) -> None:
    # Clients never send anything we act on; drain until they go away
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def events_ws(websocket: WebSocket, orchestrator):
    await websocket.accept()

    q: asyncio.Queue = await orchestrator.bus.subscribe(TOPIC_DEVICE_LOGGED, maxsize=50)
    closed = asyncio.create_task(_wait_disconnect(websocket))
    try:
        while True:
            get = asyncio.create_task(q.get())

            # Wait for a row or for the client to leave, whichever comes first
            done, _ = await asyncio.wait(
                {get, closed},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if closed in done:
                get.cancel()
                break

            await websocket.send_json({"topic": TOPIC_DEVICE_LOGGED, "row": get.result()})
    except WebSocketDisconnect:
        pass
    finally:
        closed.cancel()
        await orchestrator.bus.unsubscribe(TOPIC_DEVICE_LOGGED, q)
