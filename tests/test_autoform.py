import json

import pytest

from adminkit.autoform import AutoForm, Field, FieldConfig, Option, Slot, Style


def test_empty_field_omits_optional_keys():
    data = Field().to_dict()
    assert "placeholder" not in data
    assert "prefix-icon" not in data
    assert data["disabled"] is False
    assert data["maxlength"] is None
    assert data["style"] == {"width": ""}
    assert data["__slot__"] == {}
    assert "__config__" in data and "__vModel__" in data


def test_config_optional_keys():
    data = FieldConfig(label="Name", button_text="Upload").to_dict()
    assert data["label"] == "Name"
    assert data["buttonText"] == "Upload"
    assert "showTip" not in data
    assert "regList" in data


def test_field_round_trip():
    original = Field(
        config=FieldConfig(label="Kind", tag="el-select", span=12),
        slot=Slot(options=[Option(label="A", value="a"), Option(label="B", value="b")]),
        placeholder="choose",
        style=Style(width="100%"),
        v_model="kind",
        multiple=True,
    )
    assert Field.from_dict(original.to_dict()) == original


def test_field_survives_json():
    original = Field(v_model="title", clearable=True, list_type="text")
    text = json.dumps(original.to_dict())
    assert Field.from_dict(json.loads(text)) == original


def test_slot_keys():
    data = Slot(list_type=True, options=[Option(label="A", value="a")]).to_dict()
    assert data["list-type"] is True
    assert data["options"] == [{"label": "A", "value": "a"}]


def test_autoform_round_trip():
    form = AutoForm(
        fields=[Field(v_model="a"), Field(v_model="b", disabled=True)],
        form_ref="elForm",
        form_model="formData",
        gutter=15,
        form_btns=True,
    )
    data = form.to_dict()
    assert [f["__vModel__"] for f in data["fields"]] == ["a", "b"]
    assert AutoForm.from_dict(data) == form


def test_from_dict_rejects_non_mapping():
    with pytest.raises(TypeError):
        AutoForm.from_dict(["fields"])