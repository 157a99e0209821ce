"""Domain exceptions for IAM context."""


class InvalidSubdomainError(ValueError):
    """Raised when a tenant is given a subdomain that cannot address it.

    The subdomain must be a valid DNS label and must not be reserved for
    platform use (www, api, admin, ...).
    """

    def __init__(self, subdomain: str, reason: str):
        self.subdomain = subdomain
        self.reason = reason
        super().__init__(f"Invalid subdomain '{subdomain}': {reason}")
