from __future__ import annotations

import pytest

from fieldengine.schemas import FieldDefinitionCreate, FieldValueInput
from fieldengine.services.definitions import FieldDefinitionStore
from fieldengine.services.orchestrator import FieldOrchestrator
from fieldengine.services.values import FieldValueStore


async def _create(session, **data) -> int:
    payload = {"module": "properties", "field_type": "text"}
    payload.update(data)
    return await FieldDefinitionStore(session).create(FieldDefinitionCreate.model_validate(payload))


async def _manager_fields(session) -> tuple[int, int]:
    name_id = await _create(
        session,
        field_key="manager_name",
        label_en="Manager Name",
        label_ar="اسم المدير",
        is_required=True,
        display_order=1,
    )
    phone_id = await _create(
        session,
        field_key="manager_phone",
        label_en="Manager Phone",
        field_type="phone",
        display_order=2,
        dependencies={"showIf": {"fieldKey": "manager_name", "operator": "notEmpty"}},
        validation_rules=[{"type": "phone", "errorMessageAr": "رقم هاتف غير صالح"}],
    )
    return name_id, phone_id


@pytest.mark.anyio("asyncio")
async def test_dependent_field_appears_once_its_parent_has_a_value(session) -> None:
    orchestrator = FieldOrchestrator(session)
    name_id, phone_id = await _manager_fields(session)

    rendered = await orchestrator.evaluate("properties", 1)
    assert [item.definition.field_key for item in rendered] == ["manager_name"]
    assert rendered[0].current_value is None

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=name_id, value="Ahmed")]
    )
    assert result.ok
    assert result.saved_field_ids == [name_id]

    rendered = await orchestrator.evaluate("properties", 1)
    assert [item.definition.field_key for item in rendered] == ["manager_name", "manager_phone"]
    assert rendered[0].current_value.value == "Ahmed"
    assert all(item.is_visible for item in rendered)

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=phone_id, value="123")]
    )
    assert result.saved_field_ids == []
    assert [(error.field_key, error.message) for error in result.errors] == [
        ("manager_phone", "Invalid phone number")
    ]
    assert await FieldValueStore(session).get_value(phone_id, 1) is None


@pytest.mark.anyio("asyncio")
async def test_invalid_field_does_not_block_valid_siblings(session) -> None:
    orchestrator = FieldOrchestrator(session)
    name_id, phone_id = await _manager_fields(session)

    result = await orchestrator.submit(
        "properties",
        1,
        [
            FieldValueInput(field_id=name_id, value="Ahmed"),
            FieldValueInput(field_id=phone_id, value="not a phone"),
        ],
        language="ar",
    )

    assert result.saved_field_ids == [name_id]
    assert [error.message for error in result.errors] == ["رقم هاتف غير صالح"]
    assert (await FieldValueStore(session).get_value(name_id, 1)).value == "Ahmed"


@pytest.mark.anyio("asyncio")
async def test_context_filters_fields(session) -> None:
    orchestrator = FieldOrchestrator(session)
    await _create(session, field_key="public_note", label_en="Note", display_order=1)
    internal_id = await _create(
        session,
        field_key="internal_rating",
        label_en="Rating",
        show_in_user_form=False,
        display_order=2,
    )
    await _create(
        session,
        field_key="user_only",
        label_en="User only",
        show_in_admin=False,
        display_order=3,
    )

    user_fields = await orchestrator.evaluate("properties", 1, "user")
    admin_fields = await orchestrator.evaluate("properties", 1, "admin")

    assert [item.definition.field_key for item in user_fields] == ["public_note", "user_only"]
    assert [item.definition.field_key for item in admin_fields] == [
        "public_note",
        "internal_rating",
    ]

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=internal_id, value="5")], context="user"
    )
    assert result.errors[0].message == "Field is not editable in this context"


@pytest.mark.anyio("asyncio")
async def test_hidden_fields_still_drive_dependencies(session) -> None:
    orchestrator = FieldOrchestrator(session)
    tier_id = await _create(
        session, field_key="tier", label_en="Tier", show_in_user_form=False
    )
    await _create(
        session,
        field_key="vip_perk",
        label_en="VIP Perk",
        dependencies={"showIf": {"fieldKey": "tier", "operator": "equals", "value": "vip"}},
    )
    await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=tier_id, value="vip")], context="admin"
    )

    rendered = await orchestrator.evaluate("properties", 1, "user")

    assert [item.definition.field_key for item in rendered] == ["vip_perk"]


@pytest.mark.anyio("asyncio")
async def test_orphaned_values_are_ignored(session) -> None:
    orchestrator = FieldOrchestrator(session)
    name_id, _ = await _manager_fields(session)
    await orchestrator.submit("properties", 1, [FieldValueInput(field_id=name_id, value="Ahmed")])

    await FieldDefinitionStore(session).delete(name_id)
    rendered = await orchestrator.evaluate("properties", 1)

    assert rendered == []

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=name_id, value="Again")]
    )
    assert result.errors[0].message == "Unknown field"


@pytest.mark.anyio("asyncio")
async def test_required_visible_fields_are_reported(session) -> None:
    orchestrator = FieldOrchestrator(session)
    name_id = await _create(session, field_key="owner", label_en="Owner", is_required=True)
    await _create(
        session,
        field_key="co_owner",
        label_en="Co-owner",
        is_required=True,
        dependencies={"showIf": {"fieldKey": "owner", "operator": "equals", "value": "shared"}},
    )

    result = await orchestrator.submit("properties", 1, [], language="ar")
    assert [(error.field_key, error.message) for error in result.errors] == [
        ("owner", "هذا الحقل مطلوب")
    ]

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=name_id, value="shared")]
    )
    assert result.saved_field_ids == [name_id]
    assert [(error.field_key, error.message) for error in result.errors] == [
        ("co_owner", "This field is required")
    ]

    result = await orchestrator.submit("properties", 1, [])
    assert [error.field_key for error in result.errors] == ["co_owner"]


@pytest.mark.anyio("asyncio")
async def test_values_are_normalized_by_field_type(session) -> None:
    orchestrator = FieldOrchestrator(session)
    fee_id = await _create(
        session,
        field_key="maintenance_fee",
        label_en="Fee",
        field_type="number",
        validation_rules=[{"type": "minValue", "value": 0}],
    )
    kind_id = await _create(
        session,
        field_key="kind",
        label_en="Kind",
        field_type="dropdown",
        config={"options": [{"value": "villa"}, {"value": "apartment"}]},
    )

    result = await orchestrator.submit(
        "properties",
        1,
        [
            FieldValueInput(field_id=fee_id, value=" 250 "),
            FieldValueInput(field_id=kind_id, value="castle"),
        ],
    )

    assert result.saved_field_ids == [fee_id]
    assert result.errors[0].message == "Value must be one of the available options"
    assert (await FieldValueStore(session).get_value(fee_id, 1)).value == "250"

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=fee_id, value="-5")]
    )
    assert result.errors[0].message == "Minimum value is 0"

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=fee_id, value="lots")]
    )
    assert result.errors[0].message == "Number fields require numeric input"


@pytest.mark.anyio("asyncio")
async def test_malformed_payloads_fail_open(session) -> None:
    orchestrator = FieldOrchestrator(session)
    field_id = await _create(
        session,
        field_key="notes",
        label_en="Notes",
        dependencies="{broken",
        validation_rules="also broken",
        config="[]",
    )

    rendered = await orchestrator.evaluate("properties", 1)
    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=field_id, value="x")]
    )

    assert [item.definition.field_key for item in rendered] == ["notes"]
    assert rendered[0].options is None
    assert result.ok


@pytest.mark.anyio("asyncio")
async def test_render_localizes_labels_with_english_fallback(session) -> None:
    orchestrator = FieldOrchestrator(session, default_language="ar")
    await _create(
        session,
        field_key="manager_name",
        label_en="Manager Name",
        label_ar="اسم المدير",
        help_text_en="Full legal name",
        placeholder_en="e.g. Ahmed",
        placeholder_ar="مثال: أحمد",
        display_order=1,
    )
    await _create(session, field_key="floor", label_en="Floor", display_order=2)

    arabic = await orchestrator.evaluate("properties", None)
    english = await orchestrator.evaluate("properties", None, language="en")

    assert [item.label for item in arabic] == ["اسم المدير", "Floor"]
    assert arabic[0].help_text == "Full legal name"
    assert arabic[0].placeholder == "مثال: أحمد"
    assert english[0].label == "Manager Name"
    assert english[0].placeholder == "e.g. Ahmed"


@pytest.mark.anyio("asyncio")
async def test_new_field_never_inherits_a_deleted_fields_values(session) -> None:
    orchestrator = FieldOrchestrator(session)
    old_id = await _create(session, field_key="secret_note", label_en="Secret")
    await orchestrator.submit("properties", 1, [FieldValueInput(field_id=old_id, value="old")])
    await FieldDefinitionStore(session).delete(old_id)

    new_id = await _create(session, field_key="fresh_field", label_en="Fresh", is_required=True)
    rendered = await orchestrator.evaluate("properties", 1)
    result = await orchestrator.submit("properties", 1, [])

    assert new_id != old_id
    assert rendered[0].definition.id == new_id
    assert rendered[0].current_value is None
    assert [error.field_key for error in result.errors] == ["fresh_field"]


@pytest.mark.anyio("asyncio")
async def test_values_that_normalize_to_nothing_are_not_reported_saved(session) -> None:
    orchestrator = FieldOrchestrator(session)
    tags_id = await _create(
        session,
        field_key="amenities",
        label_en="Amenities",
        field_type="multi_select",
        is_required=True,
        config={"options": [{"value": "pool"}, {"value": "gym"}]},
    )

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=tags_id, value=" , ")]
    )

    assert result.saved_field_ids == []
    assert [error.message for error in result.errors] == ["This field is required"]
    assert await FieldValueStore(session).get_values_for_record("properties", 1) == []


@pytest.mark.anyio("asyncio")
async def test_whitespace_only_input_counts_as_empty(session) -> None:
    orchestrator = FieldOrchestrator(session)
    owner_id = await _create(session, field_key="owner", label_en="Owner", is_required=True)

    result = await orchestrator.submit(
        "properties", 1, [FieldValueInput(field_id=owner_id, value="   ")]
    )

    assert result.saved_field_ids == []
    assert [error.field_key for error in result.errors] == ["owner"]
    assert await FieldValueStore(session).get_value(owner_id, 1) is None
