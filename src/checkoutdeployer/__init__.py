"""
checkoutdeployer - Build and publish a custom checkout to storefront WebDAV
"""

__version__ = "0.1.0"

from .core import CheckoutDeployer, DeployerError, generate_deployment_id

__all__ = ["CheckoutDeployer", "DeployerError", "generate_deployment_id"]
