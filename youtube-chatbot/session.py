"""Per-stream state owned by the bot and passed to each operation."""

import time
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class UserRecord:
    """Running stats for one chat author during a stream session."""

    message_count: int = 0
    first_seen: float = 0.0
    greeted: bool = False

    @property
    def is_first_message(self):
        return self.message_count == 1


@dataclass
class StreamSession:
    """Current video, live chat and continuation token.

    At most one session is active at a time. ``reset`` adopts a new video,
    ``clear`` tears the session down when the stream ends or chat goes away.
    """

    video_id: Optional[str] = None
    live_chat_id: Optional[str] = None
    page_token: Optional[str] = None
    running: bool = False
    started_at: Optional[float] = None
    users: Dict[str, UserRecord] = field(default_factory=dict)

    @property
    def is_active(self):
        return self.running and self.live_chat_id is not None

    def reset(self, video_id, now=None):
        """Adopt a newly detected live video and drop per-session counters."""
        self.video_id = video_id
        self.live_chat_id = None
        self.page_token = None
        self.running = False
        self.started_at = time.time() if now is None else now
        self.users = {}

    def clear(self):
        self.video_id = None
        self.live_chat_id = None
        self.page_token = None
        self.running = False
        self.started_at = None
        self.users = {}

    def track(self, author_key, now=None):
        """Count a message from ``author_key`` and return its record."""
        record = self.users.get(author_key)
        if record is None:
            record = UserRecord(first_seen=time.time() if now is None else now)
            self.users[author_key] = record
        record.message_count += 1
        return record
