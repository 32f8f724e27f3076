"""
CareerHub
Career platform backend: student onboarding and resumes, employer job
postings, skill-based job matching and an AI resume assistant.

Architecture:
- PostgreSQL: Structured data (profiles, jobs, applications, resumes)
- MongoDB GridFS: Uploaded files (avatars, company logos, resume PDFs)
- Gemini: Resume writing assistant only (stateless proxy)
"""

__version__ = "1.0.0"
