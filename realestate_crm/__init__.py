"""
RealEstatePro CRM API.

Backend multi-tenant (inmobiliarias / edificios) con autenticación JWT,
jerarquía de roles y scoping por tenant.
"""

__version__ = "1.0.0"
