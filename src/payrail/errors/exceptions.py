"""Custom exception classes for the settlement service."""


class PayrailError(Exception):
    """Base exception for payrail."""

    def __init__(self, code: str, message: str, details=None, status_code: int = 500):
        self.code = code
        self.message = message
        self.details = details
        self.status_code = status_code
        super().__init__(message)


class ValidationError(PayrailError):
    """Schema or request validation failure."""

    def __init__(self, message: str, details=None):
        super().__init__("VALIDATION_ERROR", message, details, status_code=400)


class SignatureError(PayrailError):
    """Webhook signature missing or does not match the raw body."""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__("SIGNATURE_ERROR", message, status_code=401)


class ConfigurationError(PayrailError):
    """A secret required to verify requests is not configured."""

    def __init__(self, message: str = "Server configuration error"):
        super().__init__("CONFIGURATION_ERROR", message, status_code=500)


class AssetResolutionError(PayrailError):
    """The deposited asset could not be matched to a payable catalog entry."""

    def __init__(self, message: str, details=None):
        super().__init__("ASSET_RESOLUTION_ERROR", message, details, status_code=422)


class MissingWalletError(PayrailError):
    """The freelancer has no destination wallet for the resolved chain family."""

    def __init__(self, user_id: str, chain_family: str):
        self.user_id = user_id
        self.chain_family = chain_family
        super().__init__(
            "MISSING_WALLET",
            f"User '{user_id}' has no {chain_family} wallet configured",
            {"user_id": user_id, "chain_family": chain_family},
            status_code=409,
        )


class CustodyAPIError(PayrailError):
    """Transport or HTTP failure talking to the custodial provider."""

    def __init__(self, message: str, status: int | None = None, details=None):
        self.upstream_status = status
        super().__init__("CUSTODY_API_ERROR", message, details, status_code=502)


class WithdrawalProviderError(PayrailError):
    """The custodial provider rejected or failed a payout request."""

    def __init__(self, message: str, details=None):
        super().__init__("WITHDRAWAL_PROVIDER_ERROR", message, details, status_code=502)
