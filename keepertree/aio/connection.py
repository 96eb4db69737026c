"""Connection profiles and adapter lifecycle.

ProfileRegistry keeps the user's named endpoints in memory (persisting
them is the front end's job). ConnectionManager owns the one live
access adapter and guarantees the old one is closed before a new one is
opened when the active profile changes.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Union

from ..config import AccessConfig, ConnectionProfile, TransportMode
from ..errors import AccessError, TransportUnavailableError
from .api import create_access_adapter
from .error_policies import ErrorPolicy

logger = logging.getLogger(__name__)

AdapterFactory = Callable[..., Any]


class ProfileRegistry:
    """In-memory list of connection profiles plus the active selection.

    Rules:
    - the first profile added becomes active
    - removing the active profile activates the first remaining one
    - name and URL must be non-empty
    """

    def __init__(self, profiles: Optional[List[ConnectionProfile]] = None,
                 active_id: Optional[str] = None):
        self._profiles: Dict[str, ConnectionProfile] = {}
        for profile in profiles or []:
            self._profiles[profile.id] = profile
        if active_id is None and self._profiles:
            active_id = next(iter(self._profiles))
        self._active_id = active_id

    @property
    def profiles(self) -> List[ConnectionProfile]:
        return list(self._profiles.values())

    @property
    def active(self) -> Optional[ConnectionProfile]:
        if self._active_id is None:
            return None
        return self._profiles.get(self._active_id)

    def __len__(self) -> int:
        return len(self._profiles)

    def get(self, profile_id: str) -> ConnectionProfile:
        try:
            return self._profiles[profile_id]
        except KeyError:
            raise KeyError(f"Unknown connection profile: {profile_id}") from None

    def add(self, name: str, url: str,
            mode: TransportMode = TransportMode.HTTP) -> ConnectionProfile:
        """Add a profile.

        Raises:
            ValueError: If name or url is blank
        """
        name = (name or "").strip()
        url = (url or "").strip()
        if not name or not url:
            raise ValueError("Please provide both name and URL for the connection.")

        profile = ConnectionProfile(id=uuid.uuid4().hex, name=name, url=url, mode=mode)
        self._profiles[profile.id] = profile
        if self._active_id is None:
            self._active_id = profile.id
        logger.info("Added connection profile %r (%s)", name, url)
        return profile

    def remove(self, profile_id: str) -> ConnectionProfile:
        profile = self._profiles.pop(profile_id, None)
        if profile is None:
            raise KeyError(f"Unknown connection profile: {profile_id}")
        if profile_id == self._active_id:
            self._active_id = next(iter(self._profiles), None)
        return profile

    def activate(self, profile_id: str) -> ConnectionProfile:
        profile = self.get(profile_id)
        self._active_id = profile_id
        return profile

    def to_list(self) -> List[Dict[str, str]]:
        """Plain-data form for the front end to persist."""
        return [
            {'id': p.id, 'name': p.name, 'url': p.url, 'mode': p.mode.value}
            for p in self._profiles.values()
        ]

    @classmethod
    def from_list(cls, records: List[Dict[str, str]],
                  active_id: Optional[str] = None) -> "ProfileRegistry":
        profiles = [
            ConnectionProfile(id=r['id'], name=r['name'], url=r['url'],
                              mode=r.get('mode', TransportMode.HTTP.value))
            for r in records
        ]
        return cls(profiles, active_id)


def _as_config(target: Union[AccessConfig, ConnectionProfile, str]) -> AccessConfig:
    if isinstance(target, AccessConfig):
        return target
    if isinstance(target, ConnectionProfile):
        return target.to_config()
    return AccessConfig(url=target)


class ConnectionManager:
    """Owns the single live access adapter.

    Example:
        manager = ConnectionManager()
        adapter = await manager.switch("localhost:12345")
        ...
        await manager.switch(other_profile)   # old adapter closed first
        await manager.close()
    """

    def __init__(self, factory: AdapterFactory = create_access_adapter,
                 policy: Optional[ErrorPolicy] = None,
                 registry: Optional[ProfileRegistry] = None):
        """Initialize the manager.

        Args:
            factory: ``factory(config, policy=...)`` returning an adapter
            policy: Error policy handed to every adapter built
            registry: Profiles used by ``use_profile``
        """
        self._factory = factory
        self._policy = policy
        self.registry = registry if registry is not None else ProfileRegistry()
        self._adapter: Optional[Any] = None
        self._config: Optional[AccessConfig] = None

    @property
    def adapter(self) -> Any:
        """The live adapter.

        Raises:
            TransportUnavailableError: If no connection is open
        """
        if self._adapter is None:
            raise TransportUnavailableError("No active connection")
        return self._adapter

    @property
    def config(self) -> Optional[AccessConfig]:
        return self._config

    @property
    def is_open(self) -> bool:
        return self._adapter is not None

    async def switch(self, target: Union[AccessConfig, ConnectionProfile, str]) -> Any:
        """Close the current adapter, then open one for ``target``.

        A failing close is logged; the old session is abandoned either
        way and the new adapter is still opened.
        """
        config = _as_config(target)
        try:
            await self.close()
        except AccessError as e:
            logger.warning("Error closing previous connection: %s", e.message)
        finally:
            self._adapter = self._factory(config, policy=self._policy)
            self._config = config
        logger.info("Connected to %s (%s)", config.url, config.mode.value)
        return self._adapter

    async def use_profile(self, profile_id: str) -> Any:
        """Activate a registered profile and switch to it."""
        profile = self.registry.activate(profile_id)
        return await self.switch(profile)

    async def close(self) -> None:
        """Close the live adapter, if any. Idempotent."""
        adapter, self._adapter = self._adapter, None
        self._config = None
        if adapter is not None:
            await adapter.close()

    @asynccontextmanager
    async def session(self, target: Union[AccessConfig, ConnectionProfile, str]) -> AsyncIterator[Any]:
        """Scoped connection: opened on entry, closed on exit even on error."""
        adapter = await self.switch(target)
        try:
            yield adapter
        finally:
            await self.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
