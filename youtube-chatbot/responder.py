"""Decides whether and what to reply to a chat message."""

import random
import re
from dataclasses import dataclass
from typing import Optional, Tuple


MODES = ("quiet", "normal", "hype")

GREETING_WORDS = [
    "hello", "hi", "hey", "sup", "what's up", "good morning",
    "good evening", "good afternoon", "yo", "hiya", "howdy",
]

_GREETING_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(word) for word in GREETING_WORDS) + r")\b"
)

GREETINGS = (
    "Hey there! Welcome to the stream! 🎮",
    "What's up, gamer! Ready for some epic gameplay?",
    "Welcome to the party! This is gonna be awesome! 🔥",
    "Hey! Great to see you here! Let's have some fun!",
    "Welcome aboard! Hope you enjoy the stream! 🚀",
)


@dataclass(frozen=True)
class ReactionCategory:
    """Keyword-triggered phrase set with its own trigger probability."""

    name: str
    keywords: Tuple[str, ...]
    phrases: Tuple[str, ...]
    probability: float

    def matches(self, text):
        return any(keyword in text for keyword in self.keywords)


REACTIONS = (
    ReactionCategory(
        "amazing",
        ("amazing", "awesome", "incredible", "insane"),
        (
            "That was incredible! 🔥",
            "No way! How did you do that?!",
            "AMAZING play!",
            "Absolutely insane! 🤯",
            "Pro gamer move right there!",
        ),
        0.6,
    ),
    ReactionCategory(
        "fail",
        ("fail", "died", "dead", "rip"),
        (
            "Ouch! That hurt to watch 😅",
            "We've all been there!",
            "Better luck next time!",
            "F in the chat",
            "Don't worry, you got this next time!",
        ),
        0.5,
    ),
    ReactionCategory(
        "clutch",
        ("clutch", "close", "barely", "1hp"),
        (
            "CLUTCH! 🔥",
            "That was so close!",
            "Heart attack moment right there!",
            "How did you pull that off?!",
            "Insane clutch play!",
        ),
        0.7,
    ),
    ReactionCategory(
        "funny",
        ("lol", "funny", "haha", "lmao"),
        (
            "LMAO 😂",
            "That's hilarious!",
            "I can't stop laughing!",
            "Comedy gold right there!",
            "LOL that was great!",
        ),
        0.4,
    ),
    ReactionCategory(
        "encouragement",
        ("give up", "hard", "difficult"),
        (
            "You got this! 💪",
            "Keep going, you're doing great!",
            "Don't give up!",
            "Believe in yourself!",
            "You're getting better every game!",
        ),
        0.8,
    ),
)

AMBIENT = (
    "Hey {author}! 👋",
    "This stream is so good! 🔥",
    "Anyone else loving this gameplay?",
    "Chat is so active today! Love it! ❤️",
)

AMBIENT_PROBABILITY = 0.02
HYPE_AMBIENT_PROBABILITY = 0.05


def contains_greeting(text):
    """Check if lowercased ``text`` contains a greeting as a whole word."""
    return _GREETING_PATTERN.search(text) is not None


def faq_answer(text):
    """Return the fixed answer for a common question, or None."""
    if "how are you" in text or "how you doing" in text:
        return "I'm doing great! Thanks for asking! How are you enjoying the stream? 😊"

    if "what game" in text or "game name" in text:
        return "This game looks amazing! I love watching these streams! 🎮"

    if "bot" in text and ("are you" in text or "real" in text):
        return "Yep, I'm a bot! 🤖 But I'm here to hang out and enjoy the stream with everyone!"

    if "new follower" in text or "just followed" in text:
        return "Welcome to the community! 🎉"

    return None


class ResponseEngine:
    """Applies reply rules to one message at a time.

    Rules run in priority order and the first match wins: owner admin
    commands, greetings for authors not yet greeted, probabilistic keyword
    reactions, FAQ answers, then rare ambient engagement. Randomness comes
    from ``rng`` so tests can pin it down.

    ``status_provider`` returns the bot's status snapshot for ``!status``
    and ``!stats``.
    """

    def __init__(self, bot_name, owner_username="", owner_channel_id="",
                 rng=None, status_provider=None):
        self.bot_name = bot_name
        self.owner_username = owner_username
        self.owner_channel_id = owner_channel_id
        self.rng = rng or random.Random()
        self.status_provider = status_provider or dict
        self.mode = "normal"

    def is_self(self, message):
        return message.author.lower() == self.bot_name.lower()

    def is_owner(self, message):
        if self.owner_username and message.author == self.owner_username:
            return True
        return bool(self.owner_channel_id) and message.author_channel_id == self.owner_channel_id

    def generate(self, message, record) -> Optional[str]:
        """Pick the reply for ``message`` or return None to stay silent."""
        text = message.text.strip()
        lower = text.lower()

        if self.is_owner(message):
            reply = self._admin_command(text, lower)
            if reply is not None:
                return reply

        if self.mode == "quiet":
            return None

        if not record.greeted and contains_greeting(lower):
            record.greeted = True
            return self.rng.choice(GREETINGS)

        for category in REACTIONS:
            if category.matches(lower) and self.rng.random() < self._probability(category):
                return self.rng.choice(category.phrases)

        answer = faq_answer(lower)
        if answer:
            return answer

        ambient = HYPE_AMBIENT_PROBABILITY if self.mode == "hype" else AMBIENT_PROBABILITY
        if self.rng.random() < ambient:
            return self.rng.choice(AMBIENT).format(author=message.author)

        return None

    def _probability(self, category):
        if self.mode == "hype":
            return 1.0
        return category.probability

    def _admin_command(self, text, lower):
        if lower == "!ping":
            return "🏓 Pong!"

        if lower == "!status":
            status = self.status_provider()
            quota = status.get("quota", {})
            return (
                f"🤖 Bot Status: Active | Stream: {status.get('currentStream', 'none')} | "
                f"Uptime: {int(status.get('uptime', 0) // 60)}min | "
                f"Quota: {quota.get('used', 0)}/{quota.get('limit', 0)} | Mode: {self.mode}"
            )

        if lower == "!stats":
            status = self.status_provider()
            session = status.get("session", {})
            rate = status.get("rate", {})
            return (
                f"📊 Chatters: {session.get('chatters', 0)} | "
                f"Messages: {session.get('messages', 0)} | "
                f"Replies this hour: {rate.get('responsesThisHour', 0)}"
            )

        if lower.startswith("!say "):
            echo = text[5:].strip()
            return echo or None

        if lower.startswith("!mode"):
            parts = lower.split()
            if len(parts) == 2 and parts[1] in MODES:
                self.mode = parts[1]
                return f"🔧 Mode set to {self.mode}"
            return f"🔧 Mode is {self.mode}. Use: !mode {'|'.join(MODES)}"

        return None
