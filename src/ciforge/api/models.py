from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from datetime import datetime

class Base(DeclarativeBase):
    pass

class SavedConfig(Base):
    __tablename__ = "saved_configs"
    name: Mapped[str] = mapped_column(sa.Text, primary_key=True)
    platform: Mapped[str] = mapped_column(sa.Text, nullable=False)
    job_count: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    config: Mapped[dict] = mapped_column(sa.JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(sa.TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(sa.TIMESTAMP(timezone=True), nullable=False)
