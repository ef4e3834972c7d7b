"""Usage ledger feature."""
