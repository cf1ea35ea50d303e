"""
Ordered platform profile registry.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache

from app.errors import UnsupportedPlatformError
from app.extraction.platforms import BUILTIN_PROFILES
from app.extraction.types import PlatformProfile
from app.extraction.urls import url_host


class PlatformRegistry:
    """
    Registry of platform profiles, matched against a URL's host in registration order.

    The first registered profile whose host pattern matches wins, so detection
    is stable for a fixed registry. New vendors are appended with `register`;
    existing order is never changed.
    """

    def __init__(self, profiles: Iterable[PlatformProfile] = ()) -> None:
        self._profiles: list[PlatformProfile] = []
        for profile in profiles:
            self.register(profile)

    @property
    def profiles(self) -> tuple[PlatformProfile, ...]:
        return tuple(self._profiles)

    def register(self, profile: PlatformProfile) -> None:
        if any(existing.name.lower() == profile.name.lower() for existing in self._profiles):
            raise ValueError(f"Platform '{profile.name}' is already registered.")
        self._profiles.append(profile)

    def find(self, url: str) -> PlatformProfile | None:
        host = url_host(url)
        if not host:
            return None
        for profile in self._profiles:
            if profile.matches_host(host):
                return profile
        return None

    def detect(self, url: str) -> PlatformProfile:
        profile = self.find(url)
        if profile is None:
            raise UnsupportedPlatformError(f"Unsupported race timing platform: {url}")
        return profile


@lru_cache(maxsize=1)
def get_platform_registry() -> PlatformRegistry:
    """
    Return the registry of built-in vendor profiles.
    """

    return PlatformRegistry(BUILTIN_PROFILES)
