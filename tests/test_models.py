"""Tests for the public model exports."""

from enum import Enum

from pydantic import BaseModel

import skillforge.models as models
from skillforge.models import ForgeBaseModel, FrozenRecord, Recommendation, RunSample


class TestExports:
    """Tests for what skillforge.models exposes."""

    def test_exports_are_models_or_enums(self):
        """Test every exported name is a record model or an enum."""
        for name in models.__all__:
            exported = getattr(models, name)
            assert isinstance(exported, type), name
            assert issubclass(exported, (BaseModel, Enum)), name

    def test_base_classes(self):
        """Test records are frozen and views are not."""
        assert FrozenRecord.model_config["frozen"] is True
        assert ForgeBaseModel.model_config.get("frozen") is not True
        assert issubclass(RunSample, FrozenRecord)

    def test_recommendation_values(self):
        """Test recommendations serialize as plain strings."""
        assert [r.value for r in Recommendation] == ["optimize", "monitor", "ok"]
