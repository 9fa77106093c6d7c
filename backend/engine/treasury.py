"""Owner operations on the vault: asset registration and pool funding/withdrawal."""

import logging

from sqlmodel import Session

from backend.config import settings
from backend.engine.errors import InvalidAmount, NotOwner, TransferFailed
from backend.engine.guard import ReentrancyGuard, guarded_transaction, vault_guard
from backend.models.supported_asset import SupportedAsset
from backend.models.user import User
from backend.services import collateral_pool, registry
from backend.services.transfer import CollateralTransfer

logger = logging.getLogger(__name__)


class Treasury:
    def __init__(
        self,
        session: Session,
        transfer: CollateralTransfer,
        guard: ReentrancyGuard | None = None,
        feed_addresses: bool | None = None,
    ):
        self.session = session
        self.transfer = transfer
        self.guard = guard or vault_guard
        # Chainlink feed ids are aggregator contract addresses
        if feed_addresses is None:
            feed_addresses = settings.price_feed == "chainlink"
        self.feed_addresses = feed_addresses

    def register_asset(self, caller: User, asset: str, feed_id: str) -> SupportedAsset:
        with guarded_transaction(self.session, self.guard, "register_asset"):
            _require_owner(caller)
            row = registry.add_asset(
                self.session,
                asset,
                feed_id,
                registered_by=caller.username,
                require_address=self.feed_addresses,
            )
        return row

    def fund(self, account: str, amount: int) -> int:
        """Add ``amount`` wei to the pool; anyone may fund it."""
        with guarded_transaction(self.session, self.guard, "fund"):
            if amount <= 0:
                raise InvalidAmount(f"Funding amount must be positive, got {amount}")
            new_balance = collateral_pool.credit(self.session, amount)
        logger.info(f"[fund] {account} added {amount} wei, pool={new_balance}")
        return new_balance

    def withdraw(self, caller: User, recipient: str, amount: int) -> int:
        """Move ``amount`` wei from the pool to ``recipient``. Owner only."""
        with guarded_transaction(self.session, self.guard, "withdraw"):
            _require_owner(caller)
            if amount <= 0:
                raise InvalidAmount(f"Withdrawal amount must be positive, got {amount}")
            recipient = registry.validate_id(recipient, "recipient")
            new_balance = collateral_pool.debit(self.session, amount)
            if not self.transfer.send(recipient, amount, "withdraw"):
                raise TransferFailed(f"Transfer of {amount} wei to {recipient} failed")
        logger.info(f"[withdraw] {caller.username} sent {amount} wei to {recipient}, pool={new_balance}")
        return new_balance

    def balance(self) -> int:
        return collateral_pool.balance(self.session)


def _require_owner(caller: User):
    if not caller.is_admin:
        raise NotOwner(f"{caller.username} is not the vault owner")
