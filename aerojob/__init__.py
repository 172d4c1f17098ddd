"""
AeroJob
Job board backend with audience-targeted surveys.

Architecture:
- PostgreSQL: Structured data (users, companies, jobs)
- MongoDB: Documents (surveys, survey responses, search logs)
"""

__version__ = "1.0.0"
