import os
import unittest

from alembic.config import Config
from alembic.migration import MigrationContext
from alembic.operations import Operations
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine, inspect

from tests.base import Base

ALEMBIC_INI = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")


class TestInitialMigration(unittest.TestCase):

    def setUp(self):
        self.script = ScriptDirectory.from_config(Config(ALEMBIC_INI))
        self.engine = create_engine("sqlite://")

    def tearDown(self):
        self.engine.dispose()

    def _run(self, step):
        module = self.script.get_revision("0001").module
        with self.engine.begin() as connection:
            with Operations.context(MigrationContext.configure(connection)):
                getattr(module, step)()

    def test_single_head(self):
        self.assertEqual(self.script.get_heads(), ["0001"])

    def test_upgrade_builds_every_model_table(self):
        self._run("upgrade")

        inspector = inspect(self.engine)
        self.assertEqual(set(inspector.get_table_names()), set(Base.metadata.tables))
        for name, table in Base.metadata.tables.items():
            with self.subTest(table=name):
                columns = {c["name"] for c in inspector.get_columns(name)}
                self.assertEqual(columns, set(table.columns.keys()))

    def test_driver_id_number_index_is_unique(self):
        self._run("upgrade")

        indexes = {i["name"]: i for i in inspect(self.engine).get_indexes("drivers")}
        self.assertTrue(indexes["ix_drivers_driverIdNumber"]["unique"])
        self.assertFalse(indexes["ix_drivers_driverPhone"]["unique"])

    def test_downgrade_drops_everything(self):
        self._run("upgrade")
        self._run("downgrade")
        self.assertEqual(inspect(self.engine).get_table_names(), [])
