#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Credential Store - client-local API keys, one per provider

The pipeline core never reads storage itself: the controller resolves the
key for the active provider and passes the plain string along with the
request. Keys are never logged; only provider tags are.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from ai_providers import AIProviderType
from config.logging_config import get_logger

logger = get_logger(__name__)

ProviderTag = Union[AIProviderType, str]


def _tag(provider: ProviderTag) -> str:
    return AIProviderType(provider).value


def mask_key(key: str) -> str:
    """Show just enough of a key to recognise it"""
    key = key.strip()
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:3]}...{key[-4:]}"


class CredentialStore(ABC):
    """get(tag) -> key, set(tag, key), load_all() -> mapping"""

    @abstractmethod
    def get(self, provider: ProviderTag) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, provider: ProviderTag, api_key: str) -> None:
        pass

    @abstractmethod
    def load_all(self) -> Dict[str, str]:
        pass


class InMemoryCredentialStore(CredentialStore):
    """Process-local store (tests, one-off CLI runs with --api-key)"""

    def __init__(self, keys: Optional[Dict[ProviderTag, str]] = None):
        self._keys: Dict[str, str] = {}
        for provider, key in (keys or {}).items():
            self.set(provider, key)

    def get(self, provider: ProviderTag) -> Optional[str]:
        return self._keys.get(_tag(provider))

    def set(self, provider: ProviderTag, api_key: str) -> None:
        key = (api_key or "").strip()
        if key:
            self._keys[_tag(provider)] = key
        else:
            self._keys.pop(_tag(provider), None)

    def load_all(self) -> Dict[str, str]:
        return dict(self._keys)


class JsonCredentialStore(CredentialStore):
    """
    Keys persisted in a JSON file::

        {"version": "1.0", "keys": {"openai": "sk-...", "deepseek": "..."}}

    An empty key removes the provider's entry.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot read credentials file {self.path}: {e}")
            return {}
        keys = data.get("keys", {}) if isinstance(data, dict) else {}
        return {k: v for k, v in keys.items() if isinstance(v, str) and v.strip()}

    def _write(self, keys: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {"version": "1.0", "keys": keys}
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def get(self, provider: ProviderTag) -> Optional[str]:
        return self._read().get(_tag(provider))

    def set(self, provider: ProviderTag, api_key: str) -> None:
        tag = _tag(provider)
        keys = self._read()
        key = (api_key or "").strip()
        if key:
            keys[tag] = key
            logger.info(f"Stored API key for {tag}")
        else:
            keys.pop(tag, None)
            logger.info(f"Removed API key for {tag}")
        self._write(keys)

    def load_all(self) -> Dict[str, str]:
        return self._read()
