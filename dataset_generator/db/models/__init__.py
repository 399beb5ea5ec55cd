"""Model module imports for SQLAlchemy metadata registration."""

from dataset_generator.db.models.generation_run import Base
from dataset_generator.db.models.generation_run import GenerationRun
from dataset_generator.db.models.generation_run import GenerationStatusEnum
from dataset_generator.db.models.generation_run import SpecSourceEnum

__all__ = [
    "Base",
    "GenerationRun",
    "GenerationStatusEnum",
    "SpecSourceEnum",
]
