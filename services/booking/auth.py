# ============================================================
# auth.py — Accès admin par secret partagé
# ------------------------------------------------------------
# L'en-tête x-admin-password doit correspondre à ADMIN_PASSWORD
# (non vide). Sinon : 401.
# ============================================================
import hmac
from typing import Optional

from fastapi import Header, HTTPException

import config


def is_authorized(password: Optional[str]) -> bool:
    if not config.ADMIN_PASSWORD or password is None:
        return False
    return hmac.compare_digest(password.encode(), config.ADMIN_PASSWORD.encode())


def require_admin(x_admin_password: Optional[str] = Header(None)):
    if not is_authorized(x_admin_password):
        raise HTTPException(401, "Unauthorized")
