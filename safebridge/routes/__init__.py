# SPDX-License-Identifier: Apache-2.0

"""
HTTP route blueprints.
"""

from .cases import cases_bp
from .directory import legal_bp, resources_bp, users_bp
from .session import session_bp

BLUEPRINTS = [session_bp, cases_bp, resources_bp, legal_bp, users_bp]

__all__ = ["BLUEPRINTS", "cases_bp", "legal_bp", "resources_bp", "session_bp", "users_bp"]
