"""SIM implementation - scripted conversation against the HTTP API."""

import asyncio
import random
from typing import Protocol

import httpx

from chatagent.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SCRIPT = [
    ("user_001", "Alice", "we're planning a solo backpacking trip soon"),
    ("user_002", "Bob", "i just got a guitar and started learning last month"),
    ("user_001", "Alice", "thinking about the alps, maybe late summer"),
    ("user_002", "Bob", "anyway gotta run, talk later"),
]


class ISim(Protocol):
    """Generate test traffic for the agent."""

    async def start(self) -> None:
        """Start scripted scenario."""
        ...

    async def stop(self) -> None:
        """Stop scenario."""
        ...


class Sim:
    """Sends a scripted multi-user conversation into one room."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        room_id: str = "sim_room",
        script: list[tuple[str, str, str]] | None = None,
        client: httpx.AsyncClient | None = None,
        delay_range: tuple[float, float] = (1.0, 3.0),
    ):
        self._api_url = api_url
        self._room_id = room_id
        self._script = script or DEFAULT_SCRIPT
        self._delay_range = delay_range
        self._running = False
        self._task: asyncio.Task | None = None
        self._client = client
        self._owns_client = client is None
        self.transcript: list[dict] = []

    async def start(self) -> None:
        """Start scripted scenario."""
        if self._running:
            return

        self._running = True
        if self._client is None:
            self._client = httpx.AsyncClient()

        self._task = asyncio.create_task(self._run_scenario())

    async def stop(self) -> None:
        """Stop scenario."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def wait(self) -> None:
        """Wait for the scenario to finish."""
        if self._task:
            await self._task

    async def _run_scenario(self) -> None:
        """Run the scripted scenario."""
        try:
            for user_id, user_name, text in self._script:
                if not self._running:
                    break
                await self._send_message(user_id, user_name, text)
                await asyncio.sleep(random.uniform(*self._delay_range))
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("SIM scenario error: %s", e)
        finally:
            self._running = False

    async def _send_message(self, user_id: str, user_name: str, text: str) -> None:
        """Send a message via HTTP API."""
        if not self._client:
            return

        try:
            response = await self._client.post(
                f"{self._api_url}/api/messages",
                json={
                    "user_id": user_id,
                    "user_name": user_name,
                    "room_id": self._room_id,
                    "text": text,
                },
                timeout=30.0,
            )

            if response.status_code == 200:
                replies = response.json().get("responses", [])
                self.transcript.append({"user_id": user_id, "text": text, "replies": replies})
                logger.info("SIM: %s -> %s", user_id, text)
                for reply in replies:
                    logger.info("SIM: Reply: %s (%s)", reply.get("text"), reply.get("action"))
            else:
                logger.error("SIM: Error sending message: %s", response.status_code)

        except httpx.HTTPError as e:
            logger.error("SIM: Failed to send message: %s", e)
