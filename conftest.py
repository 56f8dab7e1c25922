"""Root pytest configuration."""

from pathlib import Path

import pytest
from dotenv import load_dotenv

# .env.local overrides .env, same as main.py
_root = Path(__file__).parent
load_dotenv(_root / ".env")
load_dotenv(_root / ".env.local", override=True)


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for all async tests."""
    import asyncio

    return asyncio.DefaultEventLoopPolicy()


@pytest.fixture(autouse=True)
def _no_leaked_deliveries():
    """Each test gets its own loop, so queued email tasks must not outlive it."""
    from eventhub.notifications import dispatcher

    yield
    dispatcher._pending_deliveries.clear()
