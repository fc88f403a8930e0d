from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

ASSET_NAME_LENGTH = 80


class Base(DeclarativeBase):
    pass


class AssetTemplate(Base):
    __tablename__ = "asset_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)
    asset_type: Mapped[str | None] = mapped_column(String(50))
    default_manufacturer: Mapped[str | None] = mapped_column(String(100))
    default_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    maintenance_interval_days: Mapped[int | None] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    configuration_notes: Mapped[str | None] = mapped_column(Text)

    assets: Mapped[list["Asset"]] = relationship(back_populates="template")


class Asset(Base):
    __tablename__ = "assets"
    __table_args__ = (
        UniqueConstraint("name", "version_label", name="uq_asset_name_version"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(ASSET_NAME_LENGTH), nullable=False)
    site: Mapped[str | None] = mapped_column(String(50))
    asset_type: Mapped[str | None] = mapped_column(String(50))
    manufacturer: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[str | None] = mapped_column(String(20))
    criticality: Mapped[str | None] = mapped_column(String(20))
    condition: Mapped[str | None] = mapped_column(String(20))

    version_status: Mapped[str] = mapped_column(String(20), nullable=False)
    version_label: Mapped[str] = mapped_column(String(30), nullable=False)
    version_notes: Mapped[str | None] = mapped_column(Text)
    go_live_date: Mapped[date | None] = mapped_column(Date)
    assigned_engineer_id: Mapped[str | None] = mapped_column(String(40))

    purchase_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    current_value: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))
    warranty_expiration: Mapped[date | None] = mapped_column(Date)
    gl_account: Mapped[str | None] = mapped_column(String(30))
    firmware_version: Mapped[str | None] = mapped_column(String(50))
    ip_address: Mapped[str | None] = mapped_column(String(45))
    mac_address: Mapped[str | None] = mapped_column(String(17))
    configuration_notes: Mapped[str | None] = mapped_column(Text)

    maintenance_interval_days: Mapped[int | None] = mapped_column(Integer)
    last_maintenance_date: Mapped[date | None] = mapped_column(Date)
    next_maintenance_due: Mapped[date | None] = mapped_column(Date)
    maintenance_status: Mapped[str | None] = mapped_column(String(20))

    # Physical hierarchy (parent equipment).
    parent_asset_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("assets.id")
    )
    # Version chain: the asset this version was planned from.
    predecessor_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("assets.id")
    )
    template_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("asset_templates.id")
    )

    template: Mapped[Optional["AssetTemplate"]] = relationship(
        back_populates="assets"
    )
    parent: Mapped[Optional["Asset"]] = relationship(
        remote_side=[id], foreign_keys=[parent_asset_id], back_populates="children"
    )
    children: Mapped[list["Asset"]] = relationship(
        foreign_keys=[parent_asset_id], back_populates="parent"
    )
    predecessor: Mapped[Optional["Asset"]] = relationship(
        remote_side=[id], foreign_keys=[predecessor_id], back_populates="successors"
    )
    successors: Mapped[list["Asset"]] = relationship(
        foreign_keys=[predecessor_id], back_populates="predecessor"
    )
