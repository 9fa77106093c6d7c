"""Shared fixed-point constants and numeric bounds."""

PRICE_DECIMALS = 18

UINT256_MAX = 2**256 - 1
INT256_MAX = 2**255 - 1
INT256_MIN = -(2**255)

# Close price recorded for positions liquidated without a market payout
LIQUIDATED_CLOSE_PRICE = UINT256_MAX

ZERO_ADDRESS = "0x" + "0" * 40
