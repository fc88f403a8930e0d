from decimal import Decimal

import pytest

from assetforge.errors import TemplateNotFoundError, ValidationError
from assetforge.generation.templates import (
    deactivate_template,
    get_active_template,
    list_active_templates,
    validate_template,
)
from assetforge.models.orm import AssetTemplate


class TestTemplateStore:
    def test_list_active_excludes_inactive(
        self, session, vehicle_template, switch_template, inactive_template
    ):
        names = [t.name for t in list_active_templates(session)]
        assert names == ["Core Switch", "Fleet Van"]

    def test_get_active_template(self, session, vehicle_template):
        template = get_active_template(session, vehicle_template.id)
        assert template.asset_type == "Vehicle"

    def test_get_unknown_template(self, session):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            get_active_template(session, 999_999)
        assert exc_info.value.status_code == 404

    def test_get_inactive_template(self, session, inactive_template):
        with pytest.raises(TemplateNotFoundError):
            get_active_template(session, inactive_template.id)

    def test_deactivate_template(self, session, vehicle_template):
        deactivate_template(session, vehicle_template.id)
        assert vehicle_template.is_active is False
        assert list_active_templates(session) == []


class TestValidateTemplate:
    def test_valid_template(self, vehicle_template):
        validate_template(vehicle_template)

    def test_missing_asset_type(self):
        template = AssetTemplate(name="Blank", asset_type=" ", is_active=True)
        with pytest.raises(ValidationError, match="no asset type"):
            validate_template(template)

    def test_non_positive_interval(self):
        template = AssetTemplate(
            name="Bad", asset_type="Pump", maintenance_interval_days=0
        )
        with pytest.raises(ValidationError, match="interval"):
            validate_template(template)

    def test_untracked_maintenance_is_valid(self):
        template = AssetTemplate(
            name="Untracked", asset_type="Pump", maintenance_interval_days=None
        )
        validate_template(template)

    def test_negative_cost(self):
        template = AssetTemplate(
            name="Bad", asset_type="Pump", default_cost=Decimal("-1")
        )
        with pytest.raises(ValidationError, match="cost"):
            validate_template(template)
