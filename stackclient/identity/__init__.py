"""Identity service client."""
from .service import IdentityService, API_VERSION, ACCEPT_TYPE, parse_expires

__all__ = ["IdentityService", "API_VERSION", "ACCEPT_TYPE", "parse_expires"]
