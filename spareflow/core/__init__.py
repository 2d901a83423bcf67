"""Core application components.

This module provides the foundational components for the SpareFlow API:
- Database connection management via Prisma
- Application settings and logging configuration
- Label file storage backed by Supabase
"""
