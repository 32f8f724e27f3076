"""
Schemas module - the API contract (what clients send and receive).

Everything lives in app.schemas.schemas, grouped by area:
auth, student, employer, onboarding, jobs, applications, resumes,
GitHub and the AI assistant.
"""
