"""
Parser for hub content notifications.

The hub POSTs an Atom feed with a single ``entry`` describing the new video:

    <feed xmlns:yt="http://www.youtube.com/xml/schemas/2015"
          xmlns="http://www.w3.org/2005/Atom">
      <entry>
        <yt:videoId>VIDEO_ID</yt:videoId>
        <yt:channelId>CHANNEL_ID</yt:channelId>
        <title>Video title</title>
      </entry>
    </feed>
"""

from __future__ import annotations

from dataclasses import dataclass
import xml.etree.ElementTree as ET

ATOM_NS = "http://www.w3.org/2005/Atom"
YT_NS = "http://www.youtube.com/xml/schemas/2015"


class PublicationError(ValueError):
    """Raised when a notification body cannot be turned into a Publication."""


class InvalidXml(PublicationError):
    def __init__(self, details: str = "") -> None:
        super().__init__(f"invalid XML document: {details}" if details else "invalid XML document")
        self.details = details


class MissingChild(PublicationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"missing element '{name}'")
        self.name = name


class MissingChildInner(PublicationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"element '{name}' has no text")
        self.name = name


@dataclass(slots=True, frozen=True)
class Publication:
    title: str
    video_id: str
    topic: str


def parse_publication(document: str | bytes) -> Publication:
    try:
        root = ET.fromstring(document)
    except ET.ParseError as exc:
        raise InvalidXml(str(exc)) from exc

    entry = root.find(f"{{{ATOM_NS}}}entry")
    if entry is None:
        raise MissingChild("entry")

    return Publication(
        title=_entry_text(entry, "title", ATOM_NS),
        video_id=_entry_text(entry, "videoId", YT_NS),
        topic=_entry_text(entry, "channelId", YT_NS),
    )


def _entry_text(entry: ET.Element, name: str, namespace: str) -> str:
    child = entry.find(f"{{{namespace}}}{name}")
    if child is None:
        raise MissingChild(name)
    text = (child.text or "").strip()
    if not text:
        raise MissingChildInner(name)
    return text


__all__ = [
    "ATOM_NS",
    "YT_NS",
    "InvalidXml",
    "MissingChild",
    "MissingChildInner",
    "Publication",
    "PublicationError",
    "parse_publication",
]
