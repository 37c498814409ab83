"""Authentication dependencies."""

from ...auth import get_current_claims_optional, get_current_vid

__all__ = ["get_current_claims_optional", "get_current_vid"]
