"""
GitHub Routes

GET /github/{username} - Public profile and 10 most recently updated repos
"""

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user
from app.services.github_client import GitHubClient, get_github_client
from app.schemas.schemas import GitHubProfileResponse

router = APIRouter(prefix="/github", tags=["GitHub"])


@router.get("/{username}", response_model=GitHubProfileResponse)
async def get_github_profile(
    username: str,
    user: dict = Depends(get_current_user),
    github: GitHubClient = Depends(get_github_client)
):
    return await github.fetch(username)
