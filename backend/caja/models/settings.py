from __future__ import annotations

from ..extensions import db


class AppSetting(db.Model):
    """
    Generic key-value text store for device-level singletons.

    Known keys:
    - cash_counter_draft: JSON map of denomination -> typed quantity text
    - sale_current_total_cents: running total of the sale being rung up
    """
    __tablename__ = "app_settings"

    key = db.Column(db.String(128), primary_key=True)
    value = db.Column(db.Text, nullable=False)

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value}
