"""Application context wiring the store and its collaborators together."""

import logging
from pathlib import Path

import httpx

from .assistant import Assistant
from .record_store import DB_NAME, RecordStore
from .seed import seed_store
from .settings_store import SettingsStore
from .shop import Shop

logger = logging.getLogger(__name__)


class AppContext:
    """
    Everything one process needs, built explicitly instead of held globally.

    Lifecycle: construct, then ``open()`` (opens and seeds the store, wires
    the shop, settings and assistant), use, then ``close()`` to release the
    store handle. Also usable as a context manager.
    """

    def __init__(
        self,
        data_dir: Path | None = None,
        db_name: str = DB_NAME,
        seed: bool = True,
        http_client: httpx.Client | None = None,
    ):
        self.store = RecordStore(data_dir=data_dir, name=db_name)
        self.settings = SettingsStore(data_dir=data_dir)
        self.seed = seed
        self._http_client = http_client
        self._shop: Shop | None = None

    @property
    def shop(self) -> Shop:
        if self._shop is None:
            raise RuntimeError("AppContext is not open")
        return self._shop

    def open(self) -> "AppContext":
        """
        Open the store and wire collaborators.

        Raises:
            OpenError: If the store cannot be opened.
        """
        self.store.open()
        if self.seed:
            seed_store(self.store)
        self._shop = Shop(self.store)
        return self

    def assistant(self) -> Assistant:
        """Build an assistant from the current settings."""
        return Assistant(
            api_key=self.settings.api_key,
            enabled=self.settings.ai_enabled,
            http_client=self._http_client,
        )

    def ask(self, message: str) -> str:
        """Answer a chat message using live dashboard figures as context."""
        assistant = self.assistant()
        try:
            summary = self.shop.dashboard() if assistant.uses_api else None
            return assistant.reply(message, summary)
        finally:
            assistant.close()

    def close(self) -> None:
        self.store.close()
        self._shop = None

    def __enter__(self) -> "AppContext":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
