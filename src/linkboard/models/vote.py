"""Models capturing voting interactions on posts."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, SmallInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from linkboard.db.session import Base
from linkboard.models.user import new_id

UPVOTE = 1
DOWNVOTE = -1


class Vote(Base):
    """Per-user vote on a post.

    The unique constraint on ``(post_id, user_id)`` backs the ledger rule of at
    most one vote per user and post.
    """

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("value IN (1, -1)", name="ck_votes_value"),
        UniqueConstraint("post_id", "user_id", name="uq_votes_post_id_user_id"),
        Index("ix_votes_post_id", "post_id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # 1 = upvote, -1 = downvote.
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
