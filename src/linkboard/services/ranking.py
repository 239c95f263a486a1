"""Feed ordering strategies.

All rankings are pure and rely on ``sorted`` being stable, so posts that tie
keep their input order.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Protocol, TypeVar

from linkboard.db.time import as_utc

HOT_VOTE_WEIGHT = 0.7
HOT_TIME_WEIGHT = 0.3


class Rankable(Protocol):
    votes: int
    created_at: datetime


P = TypeVar("P", bound=Rankable)


class RankingStrategy(str, Enum):
    """Feed orderings offered to readers."""

    HOT = "hot"
    NEW = "new"
    TOP = "top"


def _epoch_seconds(post: Rankable) -> float:
    return as_utc(post.created_at).timestamp()


def hot_score(post: Rankable) -> float:
    """Return ``votes * 0.7 + created_at_epoch_seconds * 0.3``.

    At real timestamps the time term dwarfs the vote term, so Hot orders by
    recency and votes only decide between posts seconds apart.
    """
    return post.votes * HOT_VOTE_WEIGHT + _epoch_seconds(post) * HOT_TIME_WEIGHT


def rank_new(posts: Iterable[P]) -> list[P]:
    """Rank by newest first."""
    return sorted(posts, key=_epoch_seconds, reverse=True)


def rank_top(posts: Iterable[P]) -> list[P]:
    """Rank by vote total, highest first."""
    return sorted(posts, key=lambda p: p.votes, reverse=True)


def rank_hot(posts: Iterable[P]) -> list[P]:
    """Rank by the weighted votes-and-timestamp score."""
    return sorted(posts, key=hot_score, reverse=True)


_RANKERS = {
    RankingStrategy.HOT: rank_hot,
    RankingStrategy.NEW: rank_new,
    RankingStrategy.TOP: rank_top,
}


def rank(posts: Iterable[P], strategy: RankingStrategy | str = RankingStrategy.HOT) -> list[P]:
    """Return ``posts`` ordered by ``strategy`` without modifying the input."""
    try:
        strategy = RankingStrategy(strategy)
    except ValueError:
        raise ValueError(f"Unknown ranking strategy: {strategy}") from None
    return _RANKERS[strategy](posts)
