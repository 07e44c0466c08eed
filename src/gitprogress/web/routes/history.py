"""File history routes."""

from pathlib import Path

from fastapi import APIRouter, HTTPException

from ...core.config import load_repo_config
from ...git.commands import log_commit_shas
from ...git.errors import GitError

router = APIRouter(prefix="/history", tags=["history"])


@router.get("/{repo_path:path}")
def file_history(repo_path: str, file: str, branch: str | None = None):
    """Commit SHAs touching `file`, newest first."""
    repo = Path(repo_path)
    config = load_repo_config(repo)
    try:
        shas = log_commit_shas(repo, Path(file), branch=branch, config=config)
    except (ValueError, FileNotFoundError) as e:
        raise HTTPException(status_code=500, detail=str(e))
    except GitError as e:
        raise HTTPException(status_code=400, detail={
            "status": e.outcome.status,
            "description": e.outcome.description,
            "exit_code": e.exit_code,
        })
    return {"file": file, "branch": branch, "commits": shas}
