"""
Environment persistence.

The at-most-one-active rule is enforced here: saving an environment with
``is_active=True`` deactivates every other environment in the same
transaction.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.environment import Environment
from ..schemas.environment import EnvironmentRecord


def list_environments(db: Session) -> list[EnvironmentRecord]:
    rows = db.query(Environment).order_by(Environment.sort_order, Environment.created_at).all()
    return [EnvironmentRecord.model_validate(row) for row in rows]


def get_active_environment(db: Session) -> EnvironmentRecord | None:
    row = db.query(Environment).filter(Environment.is_active == True).first()
    return EnvironmentRecord.model_validate(row) if row is not None else None


def save_environment(db: Session, env: EnvironmentRecord) -> EnvironmentRecord:
    """
    Create or replace an environment.

    Args:
        db: Database session
        env: Environment to store; an existing id is overwritten

    Returns:
        The stored environment
    """
    # If this environment should be active, deactivate all others
    if env.is_active:
        db.query(Environment).filter(
            Environment.id != env.id,
            Environment.is_active == True
        ).update({"is_active": False})

    db_environment = db.query(Environment).filter(Environment.id == env.id).first()
    if db_environment is None:
        max_sort_order = db.query(func.max(Environment.sort_order)).scalar()
        db_environment = Environment(
            id=env.id,
            sort_order=(max_sort_order + 1) if max_sort_order is not None else 0,
            created_at=env.created_at,
        )
        db.add(db_environment)

    db_environment.name = env.name
    db_environment.variables = env.variables
    db_environment.is_active = env.is_active

    db.commit()
    db.refresh(db_environment)
    return EnvironmentRecord.model_validate(db_environment)


def delete_environment(db: Session, environment_id: str) -> bool:
    deleted = db.query(Environment).filter(Environment.id == environment_id).delete()
    db.commit()
    return deleted > 0
