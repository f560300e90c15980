"""GitHub OAuth adapter."""

from .client import (
    GitHubOAuthClient,
    MockGitHubOAuthClient,
    RealGitHubOAuthClient,
)

__all__ = ["GitHubOAuthClient", "RealGitHubOAuthClient", "MockGitHubOAuthClient"]
