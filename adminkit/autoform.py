"""Form designer description: fields, their settings and the whole form."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any


def _key(name: str, omitempty: bool = False, kind: type | None = None,
         many: bool = False) -> dict[str, Any]:
    return {"json": name, "omit": omitempty, "kind": kind, "many": many}


def _is_empty(value: Any) -> bool:
    if is_dataclass(value):
        return False
    if isinstance(value, (list, dict, str)):
        return not value
    return value is None or value is False or value == 0


def _struct_to_dict(obj: Any) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(obj):
        meta = f.metadata
        value = getattr(obj, f.name)
        if meta["omit"] and _is_empty(value):
            continue
        if meta["kind"] is not None:
            if meta["many"]:
                value = [item.to_dict() for item in value]
            else:
                value = value.to_dict()
        out[meta["json"]] = value
    return out


def _struct_from_dict(cls: type, data: Mapping[str, Any] | None) -> Any:
    data = data or {}
    if not isinstance(data, Mapping):
        raise TypeError(f"{cls.__name__} expects a mapping")
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        meta = f.metadata
        if meta["json"] not in data:
            continue
        value = data[meta["json"]]
        kind = meta["kind"]
        if kind is not None:
            if meta["many"]:
                value = [kind.from_dict(item) for item in value or []]
            else:
                value = kind.from_dict(value)
        kwargs[f.name] = value
    return cls(**kwargs)


class _JsonStruct:
    """Mapping to and from the JSON layout the form designer uses."""

    def to_dict(self) -> dict[str, Any]:
        return _struct_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None):
        return _struct_from_dict(cls, data)


@dataclass
class FieldConfig(_JsonStruct):
    label: str = field(default="", metadata=_key("label"))
    label_width: Any = field(default=None, metadata=_key("labelWidth"))
    show_label: bool = field(default=False, metadata=_key("showLabel"))
    change_tag: bool = field(default=False, metadata=_key("changeTag"))
    tag: str = field(default="", metadata=_key("tag"))
    tag_icon: str = field(default="", metadata=_key("tagIcon"))
    required: bool = field(default=False, metadata=_key("required"))
    layout: str = field(default="", metadata=_key("layout"))
    span: int = field(default=0, metadata=_key("span"))
    document: str = field(default="", metadata=_key("document"))
    reg_list: list[Any] | None = field(default=None, metadata=_key("regList"))
    form_id: int = field(default=0, metadata=_key("formId"))
    render_key: int = field(default=0, metadata=_key("renderKey"))
    default_value: Any = field(default=None, metadata=_key("defaultValue"))
    show_tip: bool = field(default=False, metadata=_key("showTip", True))
    button_text: str = field(default="", metadata=_key("buttonText", True))
    file_size: int = field(default=0, metadata=_key("fileSize", True))
    size_unit: str = field(default="", metadata=_key("sizeUnit", True))


@dataclass
class Option(_JsonStruct):
    label: str = field(default="", metadata=_key("label"))
    value: str = field(default="", metadata=_key("value"))


@dataclass
class Slot(_JsonStruct):
    prepend: str = field(default="", metadata=_key("prepend", True))
    append: str = field(default="", metadata=_key("append", True))
    list_type: bool = field(default=False, metadata=_key("list-type", True))
    options: list[Option] = field(
        default_factory=list, metadata=_key("options", True, Option, True)
    )


@dataclass
class Style(_JsonStruct):
    width: str = field(default="", metadata=_key("width"))


@dataclass
class Field:
    config: FieldConfig = field(
        default_factory=FieldConfig, metadata=_key("__config__", kind=FieldConfig)
    )
    slot: Slot = field(default_factory=Slot, metadata=_key("__slot__", kind=Slot))
    placeholder: str = field(default="", metadata=_key("placeholder", True))
    style: Style = field(default_factory=Style, metadata=_key("style", True, Style))
    clearable: bool = field(default=False, metadata=_key("clearable", True))
    prefix_icon: str = field(default="", metadata=_key("prefix-icon", True))
    suffix_icon: str = field(default="", metadata=_key("suffix-icon", True))
    maxlength: Any = field(default=None, metadata=_key("maxlength"))
    show_word_limit: bool = field(default=False, metadata=_key("show-word-limit", True))
    readonly: bool = field(default=False, metadata=_key("readonly", True))
    disabled: bool = field(default=False, metadata=_key("disabled"))
    v_model: str = field(default="", metadata=_key("__vModel__"))
    action: str = field(default="", metadata=_key("action", True))
    accept: str = field(default="", metadata=_key("accept", True))
    name: str = field(default="", metadata=_key("name", True))
    auto_upload: bool = field(default=False, metadata=_key("auto-upload", True))
    list_type: str = field(default="", metadata=_key("list-type", True))
    multiple: bool = field(default=False, metadata=_key("multiple", True))
    filterable: bool = field(default=False, metadata=_key("filterable", True))

    def to_dict(self) -> dict[str, Any]:
        """The field in the designer's JSON layout."""
        return _struct_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Field:
        """Build a field from the designer's JSON layout."""
        return _struct_from_dict(cls, data)


@dataclass
class AutoForm:
    fields: list[Field] = field(
        default_factory=list, metadata=_key("fields", kind=Field, many=True)
    )
    form_ref: str = field(default="", metadata=_key("formRef"))
    form_model: str = field(default="", metadata=_key("formModel"))
    size: str = field(default="", metadata=_key("size"))
    label_position: str = field(default="", metadata=_key("labelPosition"))
    label_width: int = field(default=0, metadata=_key("labelWidth"))
    form_rules: str = field(default="", metadata=_key("formRules"))
    gutter: int = field(default=0, metadata=_key("gutter"))
    disabled: bool = field(default=False, metadata=_key("disabled"))
    span: int = field(default=0, metadata=_key("span"))
    form_btns: bool = field(default=False, metadata=_key("formBtns"))

    def to_dict(self) -> dict[str, Any]:
        """The form in the designer's JSON layout."""
        return _struct_to_dict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AutoForm:
        """Build a form from the designer's JSON layout."""
        return _struct_from_dict(cls, data)