"""
Programmatic Alembic migration runner.

Lets the service (or a test) bring a database to the latest schema revision
without an ``alembic.ini`` on disk, reusing an existing :class:`Engine`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_SCRIPT_LOCATION = Path(__file__).resolve().parent / "migrations"


@dataclass
class MigrationStatus:
    """Snapshot of the migration state of one database."""

    current_revision: Optional[str]
    head_revision: Optional[str]
    is_up_to_date: bool


class MigrationRunner:
    """Run Alembic migrations against the database behind *engine*.

    Parameters
    ----------
    engine:
        A synchronous SQLAlchemy :class:`Engine`.
    script_location:
        Alembic script directory.  If *None* the bundled ``migrations``
        package is used.
    """

    def __init__(self, engine: Engine, script_location: Optional[str] = None) -> None:
        self._engine = engine
        self._script_location = script_location or str(_SCRIPT_LOCATION)

    def _make_alembic_config(self) -> AlembicConfig:
        cfg = AlembicConfig()
        cfg.set_main_option("script_location", self._script_location)
        cfg.set_main_option(
            "sqlalchemy.url",
            self._engine.url.render_as_string(hide_password=False).replace("%", "%%"),
        )
        cfg.attributes["configure_logger"] = False
        return cfg

    def upgrade(self, revision: str = "head") -> None:
        """Apply every pending migration up to *revision*."""
        before = self.status().current_revision
        cfg = self._make_alembic_config()
        with self._engine.begin() as conn:
            cfg.attributes["connection"] = conn
            alembic_command.upgrade(cfg, revision)
        logger.info("Database migrated from %s to %s", before, revision)

    def downgrade(self, revision: str) -> None:
        """Downgrade to a specific revision (e.g. ``"base"`` or ``"-1"``)."""
        cfg = self._make_alembic_config()
        with self._engine.begin() as conn:
            cfg.attributes["connection"] = conn
            alembic_command.downgrade(cfg, revision)
        logger.info("Database downgraded to %s", revision)

    def status(self) -> MigrationStatus:
        with self._engine.connect() as conn:
            current_rev = MigrationContext.configure(conn).get_current_revision()

        script = ScriptDirectory.from_config(self._make_alembic_config())
        head_rev = script.get_current_head()

        return MigrationStatus(
            current_revision=current_rev,
            head_revision=head_rev,
            is_up_to_date=(current_rev == head_rev),
        )
