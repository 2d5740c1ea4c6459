"""Facade for the IMAP integration layer.

What:
  Surface the session client, folder handle, message projection and fetch
  profile types.

Why:
  Call sites should not depend on the module layout of the IMAP layer.

Interfaces:
  ``ImapConfig``, ``ImapQueryClient``, ``Folder``, ``FolderMode``, ``FolderType``,
  ``FetchItem``, ``FetchProfile``, ``Message``, ``MessageHeader``,
  ``RawMessage``.
"""

from .client import ImapConfig, ImapQueryClient
from .fetch import FetchItem, FetchProfile
from .folder import Folder, FolderMode, FolderType
from .message import Message, MessageHeader, RawMessage

__all__ = [
    "ImapConfig",
    "ImapQueryClient",
    "FetchItem",
    "FetchProfile",
    "Folder",
    "FolderMode",
    "FolderType",
    "Message",
    "MessageHeader",
    "RawMessage",
]
