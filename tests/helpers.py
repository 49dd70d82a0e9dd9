import asyncio
from typing import Any, Callable


def event_payload(event: str = "subscribe", **fields: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "event": event,
        "to_user_name": "gh_account",
        "from_user_name": "o_user_1",
        "create_time": 1700000000,
    }
    payload.update(fields)
    return payload


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout=timeout)
