import logging
import unittest
from flask import Flask

from caja.extensions import db
from caja.models import AppSetting
from caja.services import settings_service
from caja.services.settings_service import SettingsError


class SettingsServiceTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = Flask(__name__)
        cls.app.config.update(
            SECRET_KEY="test",
            SQLALCHEMY_DATABASE_URI="sqlite:///:memory:",
            SQLALCHEMY_TRACK_MODIFICATIONS=False,
            TESTING=True,
        )
        db.init_app(cls.app)
        cls.ctx = cls.app.app_context()
        cls.ctx.push()
        from caja import models  # noqa: F401
        db.create_all()

    @classmethod
    def tearDownClass(cls):
        db.session.remove()
        db.drop_all()
        cls.ctx.pop()

    def setUp(self):
        db.session.query(AppSetting).delete()
        db.session.commit()

    def test_missing_key_returns_default(self):
        self.assertIsNone(settings_service.get_setting("nope"))
        self.assertEqual(settings_service.get_setting("nope", "fallback"), "fallback")

    def test_set_setting_inserts_then_replaces(self):
        settings_service.set_setting("theme", "dark")
        settings_service.set_setting("theme", "light")

        self.assertEqual(settings_service.get_setting("theme"), "light")
        self.assertEqual(db.session.query(AppSetting).count(), 1)

    def test_set_setting_without_commit_is_rolled_back(self):
        settings_service.set_setting("pending", "1", commit=False)
        db.session.rollback()
        self.assertIsNone(settings_service.get_setting("pending"))

    def test_invalid_key_or_value(self):
        with self.assertRaises(SettingsError):
            settings_service.set_setting("", "x")
        with self.assertRaises(SettingsError):
            settings_service.set_setting("k", None)

    def test_delete_setting(self):
        settings_service.set_setting("gone", "soon")

        self.assertTrue(settings_service.delete_setting("gone"))
        self.assertFalse(settings_service.delete_setting("gone"))
        self.assertIsNone(settings_service.get_setting("gone"))

    def test_json_roundtrip(self):
        settings_service.set_json_setting(settings_service.CASH_COUNTER_DRAFT_KEY, {"1000": "2", "5": ""})
        self.assertEqual(
            settings_service.get_json_setting(settings_service.CASH_COUNTER_DRAFT_KEY),
            {"1000": "2", "5": ""},
        )

    def test_malformed_json_falls_back_to_default(self):
        settings_service.set_setting(settings_service.CASH_COUNTER_DRAFT_KEY, "{oops")
        with self.assertLogs(self.app.logger, level=logging.WARNING):
            value = settings_service.get_json_setting(settings_service.CASH_COUNTER_DRAFT_KEY, {})
        self.assertEqual(value, {})


if __name__ == "__main__":
    unittest.main()
