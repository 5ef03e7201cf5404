import logging

import pytest

from keyconf.core.config.errors import StorageWriteError, UnknownKeyError
from keyconf.core.config.resolver import (
    ConfigStore,
    EntryMetadata,
    ResolvedEntry,
    create_config_store,
)
from keyconf.core.config.schema import (
    ConfigSchema,
    integer_field,
    list_field,
    number_field,
)
from keyconf.core.config.storage import InMemoryStorage, JsonFileStorage
from keyconf.core.config.validation import ValidationError


class FailingStorage(InMemoryStorage):
    def put(self, key, value):
        raise StorageWriteError(key, "disk full")


class OSErrorStorage(InMemoryStorage):
    def put(self, key, value):
        raise PermissionError("read-only")


class UnreadableStorage(InMemoryStorage):
    def get(self, key):
        if key == "fonts.monoFamily":
            raise OSError("broken sector")
        return super().get(key)


def test_stored_and_default_values_are_combined(schema):
    storage = InMemoryStorage()
    storage.put("usageMetrics.enabled", True)
    store = create_config_store(schema, storage)

    assert store.get_stored_config_errors() is None

    usage_metrics_enabled = store.get("usageMetrics.enabled")
    assert usage_metrics_enabled.value is True
    assert usage_metrics_enabled.metadata.is_stored is True

    mono_font_family = store.get("fonts.monoFamily")
    assert mono_font_family.value == "Arial"
    assert mono_font_family.metadata.is_stored is False


def test_invalid_value_falls_back_to_default(schema):
    storage = InMemoryStorage({"usageMetrics.enabled": "abcde"})
    store = create_config_store(schema, storage)

    assert store.get_stored_config_errors() == [
        ValidationError(
            code="invalid_type",
            expected="boolean",
            received="string",
            message="Expected boolean, received string",
            path=("usageMetrics.enabled",),
        )
    ]

    usage_metrics_enabled = store.get("usageMetrics.enabled")
    assert usage_metrics_enabled.value is False
    assert usage_metrics_enabled.metadata.is_stored is False

    mono_font_family = store.get("fonts.monoFamily")
    assert mono_font_family.value == "Arial"
    assert mono_font_family.metadata.is_stored is False


def test_set_updates_value_in_store(schema):
    storage = InMemoryStorage()
    store = create_config_store(schema, storage)

    store.set("usageMetrics.enabled", True)

    assert store.get("usageMetrics.enabled") == ResolvedEntry(
        value=True, metadata=EntryMetadata(is_stored=True)
    )
    assert storage.get("usageMetrics.enabled") is True


def test_one_invalid_key_does_not_affect_others(schema):
    storage = InMemoryStorage(
        {
            "usageMetrics.enabled": "abcde",
            "fonts.monoFamily": "Menlo",
            "terminal.fontSize": 0,
        }
    )
    store = ConfigStore(schema, storage)

    assert store.get("fonts.monoFamily") == ResolvedEntry("Menlo", EntryMetadata(True))
    assert store.get("terminal.fontSize") == ResolvedEntry(15, EntryMetadata(False))
    errors = store.get_stored_config_errors()
    # schema declaration order, not storage order
    assert [error.path for error in errors] == [
        ("usageMetrics.enabled",),
        ("terminal.fontSize",),
    ]
    assert errors[1].code == "too_small"


def test_unknown_stored_keys_are_ignored(schema):
    store = ConfigStore(schema, InMemoryStorage({"legacy.option": "x"}))
    assert store.get_stored_config_errors() is None
    assert "legacy.option" not in store
    assert list(store.keys()) == list(schema)


def test_unknown_key_is_rejected(schema):
    store = ConfigStore(schema, InMemoryStorage())
    with pytest.raises(UnknownKeyError) as excinfo:
        store.get("does.not.exist")
    assert excinfo.value.key == "does.not.exist"
    assert isinstance(excinfo.value, KeyError)
    with pytest.raises(UnknownKeyError):
        store.set("does.not.exist", 1)


def test_get_is_idempotent(schema):
    store = ConfigStore(schema, InMemoryStorage({"fonts.monoFamily": "Menlo"}))
    first = store.get("fonts.monoFamily")
    assert store.get("fonts.monoFamily") is first


def test_failed_write_leaves_cache_unchanged(schema):
    store = ConfigStore(schema, FailingStorage({"usageMetrics.enabled": False}))
    before = store.get("usageMetrics.enabled")

    with pytest.raises(StorageWriteError):
        store.set("usageMetrics.enabled", True)

    assert store.get("usageMetrics.enabled") is before


def test_os_error_on_write_is_wrapped(schema):
    store = ConfigStore(schema, OSErrorStorage())
    with pytest.raises(StorageWriteError) as excinfo:
        store.set("fonts.monoFamily", "Menlo")
    assert excinfo.value.key == "fonts.monoFamily"
    assert isinstance(excinfo.value.__cause__, PermissionError)
    assert store.get("fonts.monoFamily").metadata.is_stored is False


def test_unreadable_key_resolves_to_default(schema):
    storage = UnreadableStorage({"usageMetrics.enabled": True})
    store = ConfigStore(schema, storage)
    assert store.get("fonts.monoFamily") == ResolvedEntry("Arial", EntryMetadata(False))
    assert store.get("usageMetrics.enabled").value is True
    assert store.get_stored_config_errors() is None


def test_errors_are_a_snapshot(schema):
    store = ConfigStore(schema, InMemoryStorage({"usageMetrics.enabled": "abcde"}))
    store.set("usageMetrics.enabled", True)

    assert store.get("usageMetrics.enabled").metadata.is_stored is True
    errors = store.get_stored_config_errors()
    assert len(errors) == 1

    errors.clear()
    assert len(store.get_stored_config_errors()) == 1


def test_set_does_not_validate(schema):
    store = ConfigStore(schema, InMemoryStorage())
    store.set("terminal.fontSize", 500)
    assert store.get("terminal.fontSize").value == 500


def test_mutable_defaults_are_not_shared():
    schema = ConfigSchema({"tags": list_field(default=["a"])})
    store = ConfigStore(schema, InMemoryStorage())
    store.get("tags").value.append("b")
    assert schema["tags"].default == ["a"]


def test_provenance_helpers(schema):
    store = ConfigStore(schema, InMemoryStorage({"usageMetrics.enabled": True}))
    assert store.sources_by_key() == {
        "fonts.monoFamily": "default",
        "usageMetrics.enabled": "stored",
        "terminal.fontSize": "default",
    }
    assert store.as_dict() == {
        "fonts.monoFamily": "Arial",
        "usageMetrics.enabled": True,
        "terminal.fontSize": 15,
    }
    assert store.as_dict(nested=True) == {
        "fonts": {"monoFamily": "Arial"},
        "usageMetrics": {"enabled": True},
        "terminal": {"fontSize": 15},
    }
    assert store.schema is schema
    assert set(store.entries()) == set(schema)


def test_invalid_values_are_logged(schema, caplog):
    with caplog.at_level(logging.WARNING, logger="keyconf"):
        ConfigStore(schema, InMemoryStorage({"usageMetrics.enabled": "abcde"}))
    assert "Stored value for 'usageMetrics.enabled' is invalid" in caplog.text


def test_json_file_roundtrip(schema, tmp_path):
    path = tmp_path / "config.json"
    store = ConfigStore(schema, JsonFileStorage(path))
    store.set("fonts.monoFamily", "Menlo")

    reloaded = ConfigStore(schema, JsonFileStorage(path))
    assert reloaded.get("fonts.monoFamily") == ResolvedEntry("Menlo", EntryMetadata(True))
    assert reloaded.get("usageMetrics.enabled") == ResolvedEntry(False, EntryMetadata(False))


def test_integer_bounds_apply_to_stored_values():
    schema = ConfigSchema({"workers": integer_field(default=2, min=1, max=8)})
    store = ConfigStore(schema, InMemoryStorage({"workers": 9}))
    assert store.get("workers").value == 2
    assert store.get_stored_config_errors()[0].code == "too_big"


def test_stored_nan_falls_back_to_default():
    schema = ConfigSchema({"ratio": number_field(default=0.5, min=0.0, max=1.0)})
    store = ConfigStore(schema, InMemoryStorage({"ratio": float("nan")}))
    assert store.get("ratio") == ResolvedEntry(0.5, EntryMetadata(False))
    errors = store.get_stored_config_errors()
    assert len(errors) == 1
    assert errors[0].code == "invalid_type"
    assert errors[0].received == "nan"


def test_nan_in_store_file_falls_back_to_default(tmp_path):
    path = tmp_path / "config.json"
    path.write_text('{"ratio": NaN}')
    schema = ConfigSchema({"ratio": number_field(default=0.5, min=0.0, max=1.0)})
    store = ConfigStore(schema, JsonFileStorage(path))
    assert store.get("ratio").value == 0.5
    assert store.get("ratio").metadata.is_stored is False


def test_mutating_resolved_value_leaves_storage_alone():
    storage = InMemoryStorage({"tags": ["a"]})
    schema = ConfigSchema({"tags": list_field(default=[])})
    store = ConfigStore(schema, storage)
    store.get("tags").value.append("b")
    assert storage.get("tags") == ["a"]
    assert storage.as_dict() == {"tags": ["a"]}
