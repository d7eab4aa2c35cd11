"""Domain errors for checkoutdeployer."""


class DeployerError(RuntimeError):
    """Raised when the deployment cannot continue."""
