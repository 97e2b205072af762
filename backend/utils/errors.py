"""
Domain errors for the registration flow.

Routes and utils raise these; the handlers registered in main.py turn them
into redirects or generic error pages so no store detail leaks to the client.
"""


class MarketplaceError(Exception):
    """Base class for every error the app maps to a response."""


class DuplicateKey(MarketplaceError):
    def __init__(self, field: str):
        super().__init__(f"duplicate {field}")
        self.field = field


class InvalidCredential(MarketplaceError):
    pass


class ProviderError(MarketplaceError):
    pass


class ProfileIncomplete(MarketplaceError):
    pass


class NotFound(MarketplaceError):
    pass


class NotASeller(MarketplaceError):
    pass


class AssetStoreFailure(MarketplaceError):
    pass


class StoreUnavailable(MarketplaceError):
    pass
