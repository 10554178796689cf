import pytest

from youtube_push.config import YoutubeConfig, parse_youtube_config

FEED_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015" xmlns="http://www.w3.org/2005/Atom">
  <link rel="hub" href="https://pubsubhubbub.appspot.com"/>
  <link rel="self" href="https://www.youtube.com/xml/feeds/videos.xml?channel_id={channel_id}"/>
  <title>YouTube video feed</title>
  <updated>2015-04-01T19:05:24.552394234+00:00</updated>
  <entry>
    <id>yt:video:{video_id}</id>
    <yt:videoId>{video_id}</yt:videoId>
    <yt:channelId>{channel_id}</yt:channelId>
    <title>{title}</title>
    <link rel="alternate" href="http://www.youtube.com/watch?v={video_id}"/>
    <author>
      <name>Channel title</name>
      <uri>http://www.youtube.com/channel/{channel_id}</uri>
    </author>
    <published>2015-03-06T21:40:57+00:00</published>
    <updated>2015-03-09T19:05:24.552394234+00:00</updated>
  </entry>
</feed>
"""


@pytest.fixture
def make_feed():
    def _make(video_id: str = "VIDEO_ID", channel_id: str = "CHANNEL_ID", title: str = "Video title") -> str:
        return FEED_TEMPLATE.format(video_id=video_id, channel_id=channel_id, title=title)

    return _make


@pytest.fixture
def make_config():
    """Build a config snapshot; each topic announces to destination 100 + index."""

    def _make(*topics: str, enabled: bool = True, log_channel: int | None = None) -> YoutubeConfig:
        return parse_youtube_config(
            {
                "enabled": enabled,
                "subscriptions": {
                    topic: {"channel_id": 100 + idx, "text": f"{topic}: %ID%"}
                    for idx, topic in enumerate(topics)
                },
                "log_channel": log_channel,
            }
        )

    return _make
