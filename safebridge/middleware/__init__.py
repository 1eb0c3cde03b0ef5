# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains middleware components for role context extraction and
error handling in the SafeBridge API.
"""
