"""Product database table model."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

# SQLAlchemy's own SQLite DATETIME text layout, microsecond padded
_SQLITE_NOW = "strftime('%Y-%m-%d %H:%M:%f000', 'now')"


class ProductTable(SQLModel, table=True):
    """Database persistence model for products.

    ``AUTOINCREMENT`` keeps ids strictly increasing: SQLite never hands out an
    id again, even after the highest row was deleted.
    """

    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    quantity: int = Field(default=0, sa_column_kwargs={"server_default": sa.text("0")})
    price: float = Field(default=0.0, sa_column_kwargs={"server_default": sa.text("0")})
    image_uri: str | None = Field(
        default=None, sa_column=sa.Column("imageUri", sa.String, nullable=True)
    )
    created_at: datetime = Field(
        sa_column=sa.Column(
            "createdAt",
            sa.DateTime,
            nullable=False,
            server_default=sa.text(f"({_SQLITE_NOW})"),
        )
    )
    updated_at: datetime = Field(
        sa_column=sa.Column(
            "updatedAt",
            sa.DateTime,
            nullable=False,
            server_default=sa.text(f"({_SQLITE_NOW})"),
        )
    )


# Stamps rows touched by statements that leave updatedAt alone
UPDATED_AT_TRIGGER = sa.DDL(
    """
    CREATE TRIGGER IF NOT EXISTS update_products_timestamp
    AFTER UPDATE ON products
    WHEN NEW.updatedAt = OLD.updatedAt
    BEGIN
        UPDATE products SET updatedAt = %s WHERE id = NEW.id;
    END
    """
    % _SQLITE_NOW.replace("%", "%%")
)

sa.event.listen(
    ProductTable.__table__,
    "after_create",
    UPDATED_AT_TRIGGER.execute_if(dialect="sqlite"),
)
