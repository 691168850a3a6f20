import pytest
from pydantic import ValidationError

from yepcode_mcp.schema import format_validation_error, json_schema
from yepcode_mcp.tools.env_vars import SetEnvVarArgs
from yepcode_mcp.tools.executions import GetExecutionsArgs
from yepcode_mcp.tools.schedules import UpdateScheduleArgs
from yepcode_mcp.tools.storage import UploadObjectArgs


def test_properties_use_camel_case_aliases():
    schema = json_schema(SetEnvVarArgs)
    assert set(schema["properties"]) == {"key", "value", "isSensitive"}
    assert schema["required"] == ["key", "value"]
    assert schema["properties"]["isSensitive"]["default"] is True


def test_optional_fields_have_no_null_branch_or_titles():
    prop = json_schema(UpdateScheduleArgs)["properties"]["cron"]
    assert prop["type"] == "string"
    assert "anyOf" not in prop
    assert "title" not in prop
    assert "default" not in prop


def test_nested_models_are_inlined():
    schema = json_schema(UpdateScheduleArgs)
    assert "$defs" not in schema
    settings = schema["properties"]["input"]["properties"]["settings"]
    assert set(settings["properties"]) == {"agentPoolSlug", "callbackUrl"}


def test_union_keeps_both_branches():
    content = json_schema(UploadObjectArgs)["properties"]["content"]
    types = [branch.get("type") for branch in content["anyOf"]]
    assert types == ["string", "object"]
    assert content["description"]


def test_explicit_alias_wins_over_camel_case():
    assert "from" in json_schema(GetExecutionsArgs)["properties"]
    args = GetExecutionsArgs.model_validate({"from": "2024-01-01"})
    assert args.payload() == {"from": "2024-01-01", "page": 0, "limit": 10}


def test_schema_copies_are_independent():
    first = json_schema(SetEnvVarArgs)
    first["properties"]["key"]["description"] = "changed"
    assert json_schema(SetEnvVarArgs)["properties"]["key"]["description"] != "changed"


def test_validation_accepts_wire_names_and_payload_drops_unset():
    args = UpdateScheduleArgs.model_validate(
        {"id": "s1", "allowConcurrentExecutions": False, "dateTime": "2030-01-01T10:00:00Z"}
    )
    payload = args.payload(exclude={"id"})
    assert payload["allowConcurrentExecutions"] is False
    assert payload["dateTime"].startswith("2030-01-01T10:00:00")
    assert "cron" not in payload


def test_format_validation_error_names_the_field():
    with pytest.raises(ValidationError) as exc:
        SetEnvVarArgs.model_validate({"key": "1bad", "value": "v"})
    message = format_validation_error(exc.value)
    assert message.startswith("key:")
