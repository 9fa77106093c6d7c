"""Supported-asset registry: asset id -> price feed id, write-once."""

import logging

from sqlmodel import Session, select
from web3 import Web3

from backend.engine.errors import AlreadyRegistered, InvalidAddress
from backend.models.supported_asset import SupportedAsset
from backend.utils.constants import ZERO_ADDRESS

logger = logging.getLogger(__name__)


def validate_id(value: str, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidAddress(f"{label} must not be empty")
    if text.lower() == ZERO_ADDRESS:
        raise InvalidAddress(f"{label} must not be the zero address")
    return text


def resolve_feed(session: Session, asset: str) -> str | None:
    """Return the feed id registered for ``asset``, or None."""
    row = session.get(SupportedAsset, asset)
    return row.feed_id if row else None


def list_assets(session: Session) -> list[SupportedAsset]:
    return list(session.exec(select(SupportedAsset).order_by(SupportedAsset.asset)).all())


def add_asset(
    session: Session,
    asset: str,
    feed_id: str,
    registered_by: str | None = None,
    require_address: bool = False,
) -> SupportedAsset:
    """Stage a new registry entry. The caller commits."""
    asset = validate_id(asset, "asset")
    feed_id = validate_id(feed_id, "feed_id")
    if require_address and not Web3.is_address(feed_id):
        raise InvalidAddress(f"feed_id {feed_id} is not a contract address")

    if session.get(SupportedAsset, asset) is not None:
        raise AlreadyRegistered(f"Asset {asset} is already registered")

    row = SupportedAsset(asset=asset, feed_id=feed_id, registered_by=registered_by)
    session.add(row)
    session.flush()
    logger.info(f"Registered asset {asset} -> feed {feed_id}")
    return row
