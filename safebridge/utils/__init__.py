# SPDX-License-Identifier: Apache-2.0

"""
Request helpers shared by the route modules.
"""
