"""payrail: custodial deposit settlement and payout service."""

__version__ = "0.4.0"
