# -*- coding: utf-8 -*-
"""
Утилиты для админ-панели.
"""

from store_admin.utils.security import mask_sensitive_data, parse_bearer_token

__all__ = ["mask_sensitive_data", "parse_bearer_token"]
