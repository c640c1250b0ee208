"""Directory client used by the probe.

The probe only needs four operations from a directory client: dial, bind,
search and close. ``DirectoryClient``/``DirectorySession`` describe that
surface; ``Ldap3DirectoryClient`` implements it with ldap3.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Sequence

import ldap3
from ldap3.core.exceptions import LDAPBindError, LDAPOperationResult

RESULT_SUCCESS = 0


class DirectorySession(ABC):
    """An open connection owned by exactly one probe cycle."""

    @abstractmethod
    def bind(self, principal: str, credential: str) -> None:
        """Authenticate the session. Raises on failure."""

    @abstractmethod
    def search(self, base_dn: str, search_filter: str, attributes: Sequence[str]) -> List[Any]:
        """Run a subtree search and return the entries. Raises on failure."""

    @abstractmethod
    def close(self) -> None:
        """Release the connection."""


class DirectoryClient(ABC):
    """Factory for directory sessions."""

    @abstractmethod
    def dial(self, url: str) -> DirectorySession:
        """Open a session to ``url``. Raises on failure."""


class Ldap3Session(DirectorySession):
    def __init__(self, connection: ldap3.Connection) -> None:
        self.connection = connection

    def bind(self, principal: str, credential: str) -> None:
        self.connection.user = principal
        self.connection.password = credential
        self.connection.authentication = ldap3.SIMPLE
        if not self.connection.bind():
            raise LDAPBindError(self.connection.last_error or "bind was rejected")

    def search(self, base_dn: str, search_filter: str, attributes: Sequence[str]) -> List[Any]:
        # an empty attribute list on the wire asks for all user attributes
        requested = list(attributes) or [ldap3.ALL_ATTRIBUTES]
        self.connection.search(
            search_base=base_dn,
            search_filter=search_filter,
            search_scope=ldap3.SUBTREE,
            dereference_aliases=ldap3.DEREF_NEVER,
            attributes=requested,
            size_limit=0,
            time_limit=0,
            types_only=False,
        )
        result = self.connection.result or {}
        if result.get("result", RESULT_SUCCESS) != RESULT_SUCCESS:
            raise LDAPOperationResult(
                result=result.get("result"),
                description=result.get("description"),
                dn=result.get("dn"),
                message=result.get("message"),
                response_type=result.get("type"),
            )
        return list(self.connection.entries)

    def close(self) -> None:
        self.connection.unbind()


class Ldap3DirectoryClient(DirectoryClient):
    """ldap3-backed client with per-operation timeouts.

    Args:
        timeout: seconds allowed for the TCP connect and for each response.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    def dial(self, url: str) -> DirectorySession:
        connection = self._make_connection(url)
        connection.open()
        return Ldap3Session(connection)

    def _make_connection(self, url: str) -> ldap3.Connection:
        server = ldap3.Server(url, connect_timeout=self.timeout, get_info=ldap3.NONE)
        return ldap3.Connection(
            server,
            auto_bind=ldap3.AUTO_BIND_NONE,
            raise_exceptions=True,
            receive_timeout=self.timeout,
        )


__all__ = ["DirectoryClient", "DirectorySession", "Ldap3DirectoryClient", "Ldap3Session"]
