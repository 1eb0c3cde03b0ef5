# SPDX-License-Identifier: Apache-2.0

"""
SafeBridge API - domestic-violence support portal backend.
"""

__version__ = "1.0.0"
