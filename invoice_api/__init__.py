"""
Invoice API Server Package

This package provides a FastAPI server for invoice and estimate management,
backed by Supabase for storage, file uploads and authentication.
"""

__version__ = "1.0.0"
__author__ = "Crown Interiors"
