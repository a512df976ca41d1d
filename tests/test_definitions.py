from __future__ import annotations

import pytest
from pydantic import ValidationError

from fieldengine.core.errors import ConflictError, InvalidDefinitionError, NotFoundError
from fieldengine.models import FieldType
from fieldengine.schemas import FieldDefinitionCreate, FieldDefinitionUpdate, FieldValueInput
from fieldengine.services.definitions import FieldDefinitionStore
from fieldengine.services.values import FieldValueStore


def _definition(**overrides) -> FieldDefinitionCreate:
    data = {
        "module": "properties",
        "field_key": "manager_name",
        "label_en": "Manager Name",
        "field_type": "text",
    }
    data.update(overrides)
    return FieldDefinitionCreate.model_validate(data)


@pytest.mark.anyio("asyncio")
async def test_create_and_get_definition(session) -> None:
    store = FieldDefinitionStore(session)

    field_id = await store.create(
        _definition(
            label_ar="اسم المدير",
            validation_rules=[{"type": "minLength", "value": 2}],
            config={"options": []},
        )
    )
    definition = await store.get(field_id)

    assert definition.module == "properties"
    assert definition.field_type is FieldType.TEXT
    assert definition.label_ar == "اسم المدير"
    assert definition.validation_rules == '[{"type": "minLength", "value": 2}]'
    assert definition.show_in_admin is True
    assert definition.show_in_user_form is True
    assert definition.created_at is not None


@pytest.mark.anyio("asyncio")
async def test_field_key_is_unique_per_module(session) -> None:
    store = FieldDefinitionStore(session)
    await store.create(_definition())

    with pytest.raises(ConflictError):
        await store.create(_definition(label_en="Another"))

    other_id = await store.create(_definition(module="leads"))
    assert (await store.get(other_id)).module == "leads"


@pytest.mark.anyio("asyncio")
async def test_list_by_module_orders_by_display_order_then_id(session) -> None:
    store = FieldDefinitionStore(session)
    late = await store.create(_definition(field_key="late", display_order=5))
    first = await store.create(_definition(field_key="first", display_order=1))
    tie = await store.create(_definition(field_key="tie", display_order=1))
    await store.create(_definition(module="leads", field_key="elsewhere"))

    definitions = await store.list_by_module("properties")

    assert [item.id for item in definitions] == [first, tie, late]
    assert await store.list_by_module("unknown") == []


@pytest.mark.anyio("asyncio")
async def test_update_applies_only_given_fields(session) -> None:
    store = FieldDefinitionStore(session)
    field_id = await store.create(_definition(help_text_en="Who manages it", display_order=3))

    await store.update(
        field_id,
        FieldDefinitionUpdate(label_en="Property Manager", is_required=True, display_order=None),
    )
    definition = await store.get(field_id)

    assert definition.label_en == "Property Manager"
    assert definition.is_required is True
    assert definition.display_order == 3
    assert definition.help_text_en == "Who manages it"
    assert definition.field_key == "manager_name"


def test_update_rejects_module_and_key_changes() -> None:
    with pytest.raises(ValidationError):
        FieldDefinitionUpdate.model_validate({"module": "leads"})
    with pytest.raises(ValidationError):
        FieldDefinitionUpdate.model_validate({"field_key": "renamed"})


def test_field_key_format_is_enforced() -> None:
    with pytest.raises(ValidationError):
        _definition(field_key="Manager Name")
    with pytest.raises(ValidationError):
        _definition(field_key="1st_manager")


@pytest.mark.anyio("asyncio")
async def test_field_cannot_depend_on_itself(session) -> None:
    store = FieldDefinitionStore(session)
    self_reference = {"showIf": {"fieldKey": "manager_name", "operator": "notEmpty"}}

    with pytest.raises(InvalidDefinitionError):
        await store.create(_definition(dependencies=self_reference))

    field_id = await store.create(_definition())
    with pytest.raises(InvalidDefinitionError):
        await store.update(field_id, FieldDefinitionUpdate(dependencies=self_reference))


@pytest.mark.anyio("asyncio")
async def test_missing_definitions_raise_not_found(session) -> None:
    store = FieldDefinitionStore(session)

    with pytest.raises(NotFoundError):
        await store.get(999)
    with pytest.raises(NotFoundError):
        await store.update(999, FieldDefinitionUpdate(label_en="x"))
    with pytest.raises(NotFoundError):
        await store.delete(999)


@pytest.mark.anyio("asyncio")
async def test_delete_keeps_stored_values(session) -> None:
    store = FieldDefinitionStore(session)
    values = FieldValueStore(session)
    field_id = await store.create(_definition())
    await values.save_values("properties", 1, [FieldValueInput(field_id=field_id, value="Ahmed")])

    await store.delete(field_id)

    assert await store.find_by_key("properties", "manager_name") is None
    orphan = await values.get_value(field_id, 1)
    assert orphan is not None
    assert orphan.value == "Ahmed"


@pytest.mark.anyio("asyncio")
async def test_stats_count_fields_and_values_per_module(session) -> None:
    store = FieldDefinitionStore(session)
    values = FieldValueStore(session)
    name_id = await store.create(_definition())
    phone_id = await store.create(_definition(field_key="manager_phone", field_type="phone"))
    await store.create(_definition(module="leads", field_key="lead_source"))
    await values.save_values(
        "properties",
        7,
        [
            FieldValueInput(field_id=name_id, value="Ahmed"),
            FieldValueInput(field_id=phone_id, value="0501234567"),
        ],
    )

    stats = await store.stats()

    assert stats.total_fields == 3
    assert stats.total_values == 2
    assert stats.by_module["properties"].fields == 2
    assert stats.by_module["properties"].values == 2
    assert stats.by_module["leads"].values == 0
