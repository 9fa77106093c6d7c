"""CLI tool for admin operations.

Usage:
    python -m backend.cli create-admin
    python -m backend.cli create-user
    python -m backend.cli register-asset <asset> <feed_id>
    python -m backend.cli show-position <account> <nonce>
"""

import sys
import getpass

from sqlmodel import Session, select

from backend.database import engine, create_db_and_tables
from backend.engine.errors import VaultError
from backend.engine.treasury import Treasury
from backend.models.user import User
from backend.services.auth import hash_password, generate_totp_secret, get_totp_uri
from backend.services.ledger import PositionLedger
from backend.services.transfer import PayoutLedgerTransfer
from backend.utils.constants import LIQUIDATED_CLOSE_PRICE
from backend.utils.logging import setup_logging


def create_user(is_admin: bool = False):
    """Create a user (the vault owner when ``is_admin``) with TOTP setup."""
    create_db_and_tables()

    username = input("Username: ").strip()
    if not username:
        print("Username cannot be empty.")
        sys.exit(1)

    with Session(engine) as session:
        existing = session.exec(select(User).where(User.username == username)).first()
        if existing:
            print(f"User '{username}' already exists.")
            sys.exit(1)

    password = getpass.getpass("Password: ")
    password_confirm = getpass.getpass("Confirm password: ")
    if password != password_confirm:
        print("Passwords do not match.")
        sys.exit(1)

    totp_secret = generate_totp_secret()
    totp_uri = get_totp_uri(totp_secret, username)

    user = User(
        username=username,
        hashed_password=hash_password(password),
        totp_secret=totp_secret,
        is_admin=is_admin,
    )

    with Session(engine) as session:
        session.add(user)
        session.commit()

    role = "Admin user" if is_admin else "User"
    print(f"\n{role} '{username}' created successfully.")
    print(f"\nTOTP Secret: {totp_secret}")
    print(f"TOTP URI: {totp_uri}")
    print("\nScan the QR code below with your authenticator app:")

    try:
        import qrcode
        qr = qrcode.QRCode(box_size=1, border=1)
        qr.add_data(totp_uri)
        qr.make(fit=True)
        qr.print_ascii(invert=True)
    except ImportError:
        print("(Install qrcode[pil] to display QR code in terminal)")


def register_asset(asset: str, feed_id: str):
    """Register an asset feed as the first admin user."""
    create_db_and_tables()
    with Session(engine) as session:
        admin = session.exec(select(User).where(User.is_admin == True)).first()
        if not admin:
            print("No admin user exists. Run create-admin first.")
            sys.exit(1)
        try:
            Treasury(session, PayoutLedgerTransfer(session)).register_asset(admin, asset, feed_id)
        except VaultError as e:
            print(f"Cannot register {asset}: {e.message} ({e.code})")
            sys.exit(1)
    print(f"Registered {asset} -> {feed_id}")


def show_position(account: str, nonce: int):
    with Session(engine) as session:
        try:
            pos = PositionLedger(session).get(account, nonce)
        except VaultError as e:
            print(f"{e.message} ({e.code})")
            sys.exit(1)
        close_price = "liquidated" if pos.close_price == LIQUIDATED_CLOSE_PRICE else pos.close_price
        print(f"Position {account}#{nonce}")
        print(f"  asset:       {pos.tracked_asset}")
        print(f"  status:      {pos.status.value}")
        print(f"  entry_price: {pos.entry_price}")
        print(f"  size:        {pos.size}")
        print(f"  close_price: {close_price}")
        print(f"  opened_at:   {pos.opened_at.isoformat()}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m backend.cli <command>")
        print("Commands: create-admin, create-user, register-asset, show-position")
        sys.exit(1)

    setup_logging()
    command = sys.argv[1]
    if command == "create-admin":
        create_user(is_admin=True)
    elif command == "create-user":
        create_user()
    elif command == "register-asset" and len(sys.argv) == 4:
        register_asset(sys.argv[2], sys.argv[3])
    elif command == "show-position" and len(sys.argv) == 4:
        show_position(sys.argv[2], int(sys.argv[3]))
    else:
        print(f"Unknown command or wrong arguments: {' '.join(sys.argv[1:])}")
        sys.exit(1)


if __name__ == "__main__":
    main()
