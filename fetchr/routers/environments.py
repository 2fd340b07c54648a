"""
Environment management API routes.

Environments hold the variables that {{name}} placeholders resolve against.
At most one environment is active at a time.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..exceptions import ResourceNotFoundError
from ..schemas.environment import EnvironmentRecord
from ..services import environment_service


router = APIRouter(prefix="/api/environments", tags=["environments"])


@router.get("", response_model=list[EnvironmentRecord])
def list_environments(db: Session = Depends(get_db)):
    return environment_service.list_environments(db)


@router.get("/active", response_model=Optional[EnvironmentRecord])
def get_active_environment(db: Session = Depends(get_db)):
    """Get the active environment, or null when none is active."""
    return environment_service.get_active_environment(db)


@router.put("/{environment_id}", response_model=EnvironmentRecord)
def save_environment(environment_id: str, env: EnvironmentRecord, db: Session = Depends(get_db)):
    """
    Create or replace an environment.

    If is_active is True, all other environments will be deactivated.

    Args:
        environment_id: Id of the environment; overrides the id in the body
        env: Environment data with variables as JSON text
        db: Database session

    Returns:
        The stored environment
    """
    return environment_service.save_environment(db, env.model_copy(update={"id": environment_id}))


@router.delete("/{environment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_environment(environment_id: str, db: Session = Depends(get_db)):
    if not environment_service.delete_environment(db, environment_id):
        raise ResourceNotFoundError("Environment", environment_id)
    return None
