"""
Keyword taxonomies and question patterns used by the market classifier.

All entries are lowercase substrings matched against the lowercased
question text. Order matters: the first matching term is the one reported.
"""

import re

_MONTHS = (
    "january|february|march|april|may|june|july|august|september|october|november|december"
)
_MONTH_NAMES = tuple(_MONTHS.split("|"))

# Markets that can gap on a single headline
JUMP_RISK_KEYWORDS: tuple[str, ...] = (
    # Geopolitical / regime change
    "regime", "overthrow", "coup", "revolution", "collapse", "fall of",
    "supreme leader", "khamenei", "putin ", "xi jinping", "kim jong",
    "maduro", "zelensky", "netanyahu",
    # War / conflict
    "war ", "strike ", "nuclear", "invade", "invasion", "attack on",
    "bombing", "missile", "assassination", "assassinate", "ceasefire",
    "hostage", "martial law", "military action",
    # Central banks / government decisions
    "fed ", "federal reserve", "fomc", "rate cut", "rate hike", "basis points",
    "interest rate", "powell", "ecb ", "central bank", "monetary policy",
    "tariff", "sanction",
    # Courts / legal
    "supreme court", "ruling", "verdict", "indictment", "convicted",
    "sentenced", "court decision", "lawsuit", "appeal", "pardon",
    # Elections / politics
    "primary", "nomination", "nominee", "endorsement", "withdraw",
    "drop out", "electoral", "ballot", "caucus", "delegate",
    "impeach", "resign", "cabinet", "presidential election", "win the election",
    "election winner", "elected president",
    # Deadline triggers
    "by midnight", "by end of day",
    *(f"before {month}" for month in _MONTH_NAMES),
    *(f"by {month}" for month in _MONTH_NAMES),
)

# Markets that trend toward 0 or 1 by construction
STRUCTURAL_DECAY_KEYWORDS: tuple[str, ...] = (
    # Championship / season winners
    "win the premier league", "win the champions league", "win the world series",
    "win the nba", "win the nfl", "win the stanley cup",
    "world cup winner", "championship winner", "league winner", "tournament winner",
    "win the title", "crowned champion", "season winner", "win the championship",
    "win the playoffs", "make the playoffs", "win the division",
    "win the conference", "win the cup", "win the series",
    # Super Bowl
    "win super bowl", "super bowl 20", "super bowl champion", "super bowl winner",
    # Leagues
    "english premier league", "premier league?", "la liga", "bundesliga", "serie a",
    "ligue 1", "eredivisie",
    # Awards
    "ballon d'or", "mvp ", "rookie of the year", "cy young", "heisman",
    "golden boot", "golden glove", "player of the year", "coach of the year",
    "defensive player", "most improved",
    # Lifetime / open-ended
    "ever ", "will ever", "lifetime", "career", "all-time", "hall of fame",
    # Season-long
    "finish first", "finish last", "relegated", "promoted", "qualify for",
)

# "by March", "before 2026", "by 12/31": countdown to a binary resolution
COUNTDOWN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"by ({_MONTHS})"),
    re.compile(rf"before ({_MONTHS})"),
    re.compile(r"by end of"),
    re.compile(r"by midnight"),
    re.compile(r"by \d{1,2}/\d{1,2}"),
    re.compile(r"by \d{4}"),
    re.compile(r"before \d{4}"),
)

# Questions settled by one decisive announcement or vote
SINGLE_EVENT_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(rf"will .+ {verb}")
    for verb in (
        "announce",
        "decision",
        "rule on",
        "vote on",
        "result",
        "confirm",
        "approve",
        "reject",
        "pass",
        "veto",
    )
)


def find_keyword(text: str, keywords: tuple[str, ...]) -> str | None:
    """Return the first keyword contained in text (case-insensitive), if any."""
    lowered = text.lower()
    for keyword in keywords:
        if keyword in lowered:
            return keyword
    return None


def find_jump_risk_keyword(text: str) -> str | None:
    return find_keyword(text, JUMP_RISK_KEYWORDS)


def find_structural_decay_keyword(text: str) -> str | None:
    return find_keyword(text, STRUCTURAL_DECAY_KEYWORDS)
