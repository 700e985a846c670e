# SPDX-License-Identifier: Apache-2.0

"""
Flask middleware for the directory API.
"""
