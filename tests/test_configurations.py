"""
Tests for ScalingConfiguration validation and the standard catalog.
"""

import pytest

from cardiac_scaling.configurations import (
    ScalingConfiguration,
    get_quick_comparison_configurations,
    get_standard_configurations,
)


def _ids(configs):
    return [c.id for c in configs]


class TestScalingConfiguration:
    def test_tc001_valid_allometric(self):
        config = ScalingConfiguration(
            id="lbm_half", name="LBM^0.5", approach="allometric", variable="lbm", exponent=0.5
        )
        assert config.source_data == "bsa"

    def test_tc002_ratiometric_requires_unit_exponent(self):
        with pytest.raises(ValueError, match="must use exponent 1.0"):
            ScalingConfiguration(
                id="bad", name="Bad", approach="ratiometric", variable="bsa", exponent=1.5
            )

    def test_tc003_ratiometric_requires_matching_basis(self):
        """The value used forward must equal the value read backward"""
        with pytest.raises(ValueError, match="must scale by its source basis"):
            ScalingConfiguration(
                id="bad",
                name="Bad",
                approach="ratiometric",
                variable="lbm",
                exponent=1.0,
                source_data="bsa",
            )

    def test_tc004_allometric_requires_positive_exponent(self):
        with pytest.raises(ValueError, match="positive exponent"):
            ScalingConfiguration(
                id="bad", name="Bad", approach="allometric", variable="bsa", exponent=0.0
            )

    @pytest.mark.parametrize(
        "field, value, message",
        [
            ("approach", "loglinear", "Unsupported approach"),
            ("variable", "weight", "Unknown scaling variable"),
            ("source_data", "bmi", "Unknown index basis"),
            ("id", "  ", "non-empty"),
        ],
    )
    def test_tc005_unknown_fields_rejected(self, field, value, message):
        kwargs = dict(id="c", name="C", approach="allometric", variable="bsa", exponent=1.5)
        kwargs[field] = value
        with pytest.raises(ValueError, match=message):
            ScalingConfiguration(**kwargs)

    def test_tc006_frozen(self):
        config = get_standard_configurations("linear")[0]
        with pytest.raises(ValueError):
            config.exponent = 2.0


class TestStandardCatalog:
    def test_tc007_linear(self):
        configs = get_standard_configurations("linear")
        assert _ids(configs) == [
            "ratiometric_bsa",
            "allometric_lbm",
            "allometric_bsa",
            "ratiometric_height",
        ]
        lbm, bsa, height = configs[1], configs[2], configs[3]
        assert lbm.exponent == pytest.approx(0.33)
        assert bsa.exponent == 0.5
        assert height.approach == "ratiometric" and height.source_data == "height"

    def test_tc008_area_omits_allometric_bsa(self):
        configs = get_standard_configurations("area")
        assert _ids(configs) == [
            "ratiometric_bsa",
            "allometric_lbm",
            "allometric_height",
            "height_16",
            "height_27",
        ]
        assert configs[1].exponent == pytest.approx(0.67)
        assert configs[2].exponent == 2.0

    @pytest.mark.parametrize("measurement_type", ["mass", "volume"])
    def test_tc009_three_dimensional(self, measurement_type):
        configs = {c.id: c for c in get_standard_configurations(measurement_type)}
        assert list(configs) == [
            "ratiometric_bsa",
            "allometric_lbm",
            "allometric_bsa",
            "allometric_height",
            "height_16",
            "height_27",
            "height_21",
        ]
        assert configs["allometric_bsa"].exponent == 1.5
        assert configs["allometric_height"].exponent == 3.0
        assert configs["height_21"].source_data == "height"
        assert configs["height_21"].exponent == 2.1

    def test_tc010_empirical_height_laws_use_their_own_basis(self):
        configs = {c.id: c for c in get_standard_configurations("mass")}
        assert configs["height_16"].source_data == "height16"
        assert configs["height_16"].exponent == 1.6
        assert configs["height_27"].source_data == "height27"
        assert configs["height_27"].exponent == 2.7

    def test_tc011_unit_lbm_exponent_labeled_geometric(self):
        """LBM^1.0 is labeled geometrically appropriate, not universal"""
        lbm = get_standard_configurations("mass")[1]
        assert lbm.exponent == 1.0
        assert "Geometrically Appropriate" in lbm.name
        assert "Universal" not in lbm.description

        linear_lbm = get_standard_configurations("linear")[1]
        assert "Universal" in linear_lbm.description

    def test_tc012_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown measurement type"):
            get_standard_configurations("temporal")

    def test_tc013_ids_unique(self):
        for measurement_type in ("linear", "area", "mass", "volume"):
            ids = _ids(get_standard_configurations(measurement_type))
            assert len(ids) == len(set(ids))

    def test_tc014_quick_comparison(self):
        assert _ids(get_quick_comparison_configurations("volume")) == [
            "ratiometric_bsa",
            "allometric_lbm",
        ]
