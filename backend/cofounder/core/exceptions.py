class CoFounderError(Exception):
    """Base exception for Co-Founder application."""

    pass


class ConfigurationError(CoFounderError):
    """Raised when a required setting (usually a secret) is missing."""

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"{setting.upper()} is not configured")


class LLMGatewayError(CoFounderError):
    """Raised when the LLM gateway answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"LLM gateway returned {status_code}")


class PaymentProviderError(CoFounderError):
    """Raised when the payment provider rejects or fails a request."""

    pass


class SubscriptionActivationError(CoFounderError):
    """Raised when a verified payment could not be applied to the profile."""

    def __init__(self, user_id: str, order_id: str, reason: str):
        self.user_id = user_id
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Subscription activation failed for order '{order_id}': {reason}")


class PaymentSignatureError(CoFounderError):
    """Raised when a checkout callback signature does not match."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Invalid payment signature for order '{order_id}'")


class PaymentOrderStateError(CoFounderError):
    """Raised when a verified payment targets an order that is no longer pending."""

    def __init__(self, order_id: str, status: str):
        self.order_id = order_id
        self.status = status
        super().__init__(f"Order '{order_id}' is {status}, expected pending")


class PaymentPlanMismatchError(CoFounderError):
    """Raised when a verify request names a different plan than the order was priced for."""

    def __init__(self, order_id: str, ordered_plan: str, requested_plan: str):
        self.order_id = order_id
        self.ordered_plan = ordered_plan
        self.requested_plan = requested_plan
        super().__init__(f"Order '{order_id}' was placed for {ordered_plan}, not {requested_plan}")


class RoadmapExistsError(CoFounderError):
    """Raised when an idea already has a roadmap."""

    def __init__(self, idea_id: str):
        self.idea_id = idea_id
        super().__init__(f"Roadmap already exists for idea '{idea_id}'")
