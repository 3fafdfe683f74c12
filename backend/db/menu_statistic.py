from sqlalchemy import Column, Date, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class MenuStatistic(Base):
    """How many times a menu was ordered on a given day"""
    __tablename__ = "menu_statistics"
    __table_args__ = (
        UniqueConstraint("menu_id", "day", name="uq_menu_statistics_menu_day"),
    )

    stat_id = Column(Integer, primary_key=True, autoincrement=True)
    menu_id = Column(Integer, ForeignKey("menus.menu_id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(Date, nullable=False, index=True)
    count = Column(Integer, nullable=False, default=0)

    menu = relationship("Menu", lazy="joined")

    @property
    def to_schema(self):
        return {
            "stat_id": self.stat_id,
            "menu_id": self.menu_id,
            "name": self.menu.name if self.menu is not None else None,
            "day": self.day,
            "count": self.count,
        }
