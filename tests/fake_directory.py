"""In-memory directory client used to drive the probe without a server."""

from __future__ import annotations

import time
from typing import Any, List, Optional, Sequence

from services.ldap_probe.src.clients.ldap_client import DirectoryClient, DirectorySession


class FakeEntry:
    def __init__(self, dn: str, cn: str) -> None:
        self.entry_dn = dn
        self.entry_attributes_as_dict = {"cn": [cn]}


class FakeSession(DirectorySession):
    def __init__(self, client: "FakeDirectoryClient") -> None:
        self.client = client

    def bind(self, principal: str, credential: str) -> None:
        self.client.calls.append(("bind", principal, credential))
        time.sleep(self.client.delay)
        if self.client.fail_bind is not None:
            raise self.client.fail_bind

    def search(self, base_dn: str, search_filter: str, attributes: Sequence[str]) -> List[Any]:
        self.client.calls.append(("search", base_dn, search_filter, list(attributes)))
        time.sleep(self.client.delay)
        if self.client.fail_search is not None:
            raise self.client.fail_search
        return list(self.client.entries)

    def close(self) -> None:
        self.client.calls.append(("close",))
        self.client.open_sessions -= 1
        if self.client.fail_close is not None:
            raise self.client.fail_close


class FakeDirectoryClient(DirectoryClient):
    """Records every call; each phase can be told to raise."""

    def __init__(
        self,
        fail_connect: Optional[Exception] = None,
        fail_bind: Optional[Exception] = None,
        fail_search: Optional[Exception] = None,
        fail_close: Optional[Exception] = None,
        entries: Optional[List[Any]] = None,
        delay: float = 0.0,
    ) -> None:
        self.fail_connect = fail_connect
        self.fail_bind = fail_bind
        self.fail_search = fail_search
        self.fail_close = fail_close
        self.entries = entries if entries is not None else [FakeEntry("cn=admin,dc=example,dc=org", "admin")]
        self.delay = delay
        self.calls: List[tuple] = []
        self.open_sessions = 0

    def dial(self, url: str) -> DirectorySession:
        self.calls.append(("dial", url))
        time.sleep(self.delay)
        if self.fail_connect is not None:
            raise self.fail_connect
        self.open_sessions += 1
        return FakeSession(self)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)
