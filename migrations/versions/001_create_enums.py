"""Create enum types used by dataset generation audit tables."""

from typing import Sequence
from typing import Union

from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_create_enums"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

generation_status_enum = postgresql.ENUM(
    "succeeded",
    "failed",
    name="generation_status",
)


def upgrade() -> None:
    """Create enum types before the audit table is introduced."""
    bind = op.get_bind()
    generation_status_enum.create(bind, checkfirst=True)


def downgrade() -> None:
    """Drop enum types once no table depends on them."""
    bind = op.get_bind()
    generation_status_enum.drop(bind, checkfirst=True)
