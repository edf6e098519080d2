"""
CaseVault component - legal case directory.
"""

from ._impl import CaseValidationError, CaseVaultService, validate_case_data

__all__ = ["CaseValidationError", "CaseVaultService", "validate_case_data"]
