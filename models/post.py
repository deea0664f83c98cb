from sqlalchemy import Column, String, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Post(BaseModel, Base):
    __tablename__ = "posts"

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # joined so serialized posts carry their author after the session closes
    author = relationship("User", back_populates="posts", lazy="joined")

    __table_args__ = (
        Index("ix_posts_author_id", "author_id"),
    )
