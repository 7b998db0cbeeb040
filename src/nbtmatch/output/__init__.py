"""Rendering of ServiceResult for humans (rich) and machines (JSON)."""
