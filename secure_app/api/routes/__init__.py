"""Route modules for the Secure App API and pages."""
from . import auth, pages

__all__ = ["auth", "pages"]
