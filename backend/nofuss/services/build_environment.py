"""
Build Environment

The external environment where the website is actually built.
Consumed as a capability: provision once, save state on request.
"""
from abc import ABC, abstractmethod
from typing import Optional
import logging
import uuid

logger = logging.getLogger(__name__)


class BuildEnvironment(ABC):
    """Interface to the external build environment."""

    @abstractmethod
    async def provision(self, name: str, description: Optional[str]) -> str:
        """Create a build environment and return its opaque handle."""
        pass

    @abstractmethod
    async def save_state(self, handle: str) -> bool:
        """Persist the current build state. Returns False when it could not."""
        pass


class LocalBuildEnvironment(BuildEnvironment):
    """Placeholder environment: hands out handles and always saves."""

    async def provision(self, name: str, description: Optional[str]) -> str:
        handle = f"build-{uuid.uuid4().hex[:12]}"
        logger.info(f"Provisioned build environment {handle} for '{name}'")
        return handle

    async def save_state(self, handle: str) -> bool:
        logger.debug(f"Saved build state for {handle}")
        return True


_environment: Optional[BuildEnvironment] = None


def get_build_environment() -> BuildEnvironment:
    """Get or create the build environment (FastAPI dependency)."""
    global _environment
    if _environment is None:
        _environment = LocalBuildEnvironment()
    return _environment
