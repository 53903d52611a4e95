# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# Catalog product (style). Prices are owned by the catalog/finance collaborators,
# manufacturing only reads the display fields.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    base_price = Column(Float, CheckConstraint("base_price >= 0"), nullable=False, default=0)
    image_url = Column(String, nullable=True)

    variants = relationship("ProductVariant", back_populates="product")


# Colorway / variant of a product
class ProductVariant(Base):
    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    variant_code = Column(String, unique=True, nullable=False)
    color = Column(String, nullable=True)
    msrp = Column(Float, nullable=True)
    cost = Column(Float, nullable=True)
    image_url = Column(String, nullable=True)

    product = relationship("Product", back_populates="variants")
