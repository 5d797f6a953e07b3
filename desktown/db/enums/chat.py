"""Chat enums."""

from enum import Enum


class ThreadType(str, Enum):
    GROUP = "group"
    DIRECT = "direct"


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    FILE = "file"
