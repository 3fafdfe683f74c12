from sqlalchemy import Column, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from .base import Base


class Menu(Base):
    """Menu catalog entry; ``price`` is stored, never derived from ingredient cost"""
    __tablename__ = "menus"

    menu_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)

    ingredients = relationship(
        "MenuIngredient",
        back_populates="menu",
        cascade="all, delete-orphan",
        order_by="MenuIngredient.ingredient_id",
        lazy="selectin",
    )

    @property
    def to_schema(self):
        return {
            "menu_id": self.menu_id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "ingredients": [i.to_schema for i in self.ingredients],
        }


class MenuIngredient(Base):
    __tablename__ = "menu_ingredients"

    ingredient_id = Column(Integer, primary_key=True, autoincrement=True)
    menu_id = Column(Integer, ForeignKey("menus.menu_id", ondelete="CASCADE"), nullable=False, index=True)
    stock_name = Column(String, nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False)  # measurement unit name

    menu = relationship("Menu", back_populates="ingredients")

    @property
    def to_schema(self):
        return {"stock_name": self.stock_name, "quantity": self.quantity, "unit": self.unit}
