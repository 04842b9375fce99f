"""
Domain exceptions raised by the service layer.

Routes translate these into HTTP responses; services never raise
HTTPException themselves.
"""


class PlanLimitError(ValueError):
    """Free plan has reached its tracked-subscription cap."""

    def __init__(self, limit: int, used: int):
        self.limit = limit
        self.used = used
        super().__init__(f"Free plan limited to {limit} subscriptions")


class PaymentConfigError(ValueError):
    """A payment provider is not configured on this deployment."""


class PaymentProviderError(ValueError):
    """A payment provider rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)


class WebhookVerificationError(ValueError):
    """Webhook or payment signature did not verify."""
