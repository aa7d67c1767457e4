from __future__ import annotations

from unittest.mock import patch

from django.db import connection
from django.test import TestCase

import core.startup
from core.elections_services import StorageTransactionUnsupportedError
from core.startup import ensure_atomic_commit_supported


class StartupStorageCheckTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        core.startup._storage_checked = False

    def tearDown(self) -> None:
        core.startup._storage_checked = False
        super().tearDown()

    def test_passes_on_transactional_database(self) -> None:
        with self.assertLogs("core.startup", level="INFO"):
            ensure_atomic_commit_supported()

        self.assertTrue(core.startup._storage_checked)

    def test_rejects_database_without_transactions(self) -> None:
        with patch.object(connection.features, "supports_transactions", False):
            with self.assertRaises(StorageTransactionUnsupportedError) as ctx:
                ensure_atomic_commit_supported()

        self.assertEqual(ctx.exception.code, "TRANSACTION_NOT_SUPPORTED")
        self.assertFalse(core.startup._storage_checked)

    def test_runs_the_check_once(self) -> None:
        with patch("core.startup._ensure_storage_transactions") as check_mock:
            ensure_atomic_commit_supported()
            ensure_atomic_commit_supported()

        check_mock.assert_called_once_with()
