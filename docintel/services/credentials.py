"""
Credential providers
Supply the caller-side API key that travels with a chat request.
"""
from abc import ABC, abstractmethod
from typing import Optional

from docintel.state.store import DataStore


class CredentialProvider(ABC):

    @abstractmethod
    def get_api_key(self, engine: str) -> Optional[str]:
        pass


class StoreCredentialProvider(CredentialProvider):
    """Keys saved from Settings for one session, else the organization's keys."""

    def __init__(self, store: DataStore):
        self.store = store

    def get_api_key(self, engine: str) -> Optional[str]:
        key = self.store.get_api_keys().for_engine(engine)
        if key:
            return key
        return self.store.organization.settings.api_keys.for_engine(engine)

